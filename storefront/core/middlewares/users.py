from fastapi import status
from storefront.core.exceptions.app_exception import AppHttpException
from storefront.models.user import User

def is_admin(user: User):
    if not user.is_admin:
        raise AppHttpException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
