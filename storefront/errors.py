class StorefrontError(Exception):
    """Base for errors the API reports to clients as {"message": ...}."""

    status_code = 400

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
