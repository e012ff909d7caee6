# billtracker/schemas/user.py
from pydantic import BaseModel, EmailStr, Field
from typing import Literal, Optional, Union


class UserOut(BaseModel):
    id: int
    name: str
    email: str
    notification_email: Optional[str] = None
    notification_days_before: int

    class Config:
        from_attributes = True


class NotificationSettingsUpdate(BaseModel):
    # "" clears the override so reminders go to the login e-mail again
    notification_email: Optional[Union[EmailStr, Literal[""]]] = None
    notification_days_before: Optional[int] = Field(None, ge=1, le=30)
