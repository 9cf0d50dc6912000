class NotFoundError(LookupError):
    pass


class ConflictError(ValueError):
    pass
