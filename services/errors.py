class CommentFetchError(Exception):
    """Błąd pobrania pojedynczego elementu (media/wideo/komentarze)"""
    pass

class PlatformScopeError(Exception):
    """Token nie ma wymaganych uprawnień - użytkownik musi ponownie połączyć konto"""

    def __init__(self, platform: str, message: str):
        super().__init__(message)
        self.platform = platform
        self.message = message

    def to_dict(self):
        return {
            "platform": self.platform,
            "code": "reauthorization_required",
            "message": self.message,
        }

class TokenRefreshError(Exception):
    """Nie udało się odświeżyć tokenu dostępu"""
    pass
