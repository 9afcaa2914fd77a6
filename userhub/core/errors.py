# userhub/core/errors.py
"""
错误分类：领域错误由服务层显式抛出；存储错误由网关转换后原样上抛。
路由层统一映射为信封 {ok:false, error} 与对应 HTTP 状态码。
"""


class AppError(Exception):
    status_code = 500
    code = "internal_error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code


class ValidationError(AppError):
    status_code = 400
    code = "validation_error"


class EmptyFieldsError(AppError):
    status_code = 400
    code = "empty_fields"

    def __init__(self, message: str = "at least one of name, email, password is required"):
        super().__init__(message)


class DuplicateUserEmailError(AppError):
    status_code = 400
    code = "duplicate_user_email"

    def __init__(self, email: str = ""):
        super().__init__(f"email already registered: {email}" if email else "email already registered")
        self.email = email


class WrongCredentialsError(AppError):
    status_code = 401
    code = "wrong_credentials"

    def __init__(self, message: str = "wrong email or password"):
        super().__init__(message)


class TokenError(AppError):
    status_code = 401
    code = "invalid_token"


class NotFoundError(AppError):
    status_code = 404
    code = "not_found"


class DataStoreError(AppError):
    status_code = 500
    code = "data_store_error"


class TokenStoreError(DataStoreError):
    code = "token_store_error"
