from fastapi import status
from libs.result import Error


class ClientError(Exception):
    def __init__(self, base_error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)


STATUS_BY_CODE = {
    # 400
    "INVALID_IDENTITY": status.HTTP_400_BAD_REQUEST,
    "INVALID_AMOUNT": status.HTTP_400_BAD_REQUEST,
    "INVALID_TTL": status.HTTP_400_BAD_REQUEST,
    "INVALID_SUBJECT": status.HTTP_400_BAD_REQUEST,
    "INVALID_REASON": status.HTTP_400_BAD_REQUEST,
    "INVALID_SCOPE": status.HTTP_400_BAD_REQUEST,
    "TENANT_REQUIRED": status.HTTP_400_BAD_REQUEST,
    # 401
    "TOKEN_INVALID": status.HTTP_401_UNAUTHORIZED,
    # 402
    "INSUFFICIENT_CREDIT": status.HTTP_402_PAYMENT_REQUIRED,
    # 403
    "AUTHORIZATION_DENIED": status.HTTP_403_FORBIDDEN,
    "RESTRICTION_VIOLATED": status.HTTP_403_FORBIDDEN,
    # 404
    "INVITATION_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "WORKFLOW_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    # 409
    "ALREADY_CONSUMED": status.HTTP_409_CONFLICT,
    "INVITE_ALREADY_EXISTS": status.HTTP_409_CONFLICT,
    "INVITATION_ALREADY_REDEEMED": status.HTTP_409_CONFLICT,
    "INVALID_TRANSITION": status.HTTP_409_CONFLICT,
    # 410
    "TOKEN_EXPIRED": status.HTTP_410_GONE,
    "TOKEN_REVOKED": status.HTTP_410_GONE,
    # 502
    "DELIVERY_FAILED": status.HTTP_502_BAD_GATEWAY,
}


def to_http_error(error: Error) -> Exception:
    """Translate a use case error into the exception the handlers render"""
    status_code = STATUS_BY_CODE.get(error.code)
    if status_code is None:
        return ServerError(error)
    return ClientError(error, status_code=status_code)
