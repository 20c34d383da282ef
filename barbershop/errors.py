# barbershop/errors.py


class BarbershopError(Exception):
    """Domain error raised by the service layer.

    ``main`` turns it into a JSON ``{"detail": ...}`` response with the
    error's status code, the same shape routers produce with HTTPException.
    """

    status_code = 400

    def __init__(self, detail: str, status_code: int = None):
        super().__init__(detail)
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code


class NotFoundError(BarbershopError):
    status_code = 404


class BookingError(BarbershopError):
    status_code = 422


class LedgerError(BarbershopError):
    status_code = 422


class LoyaltyError(BarbershopError):
    status_code = 409


class StockError(BarbershopError):
    status_code = 409
