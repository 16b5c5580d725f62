from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field


# Request bodies

class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    name: str = Field(..., min_length=1)
    account_type: Literal["personal", "family"] = "personal"
    address: Optional[str] = None


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class PasswordChange(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8)


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    avatar_url: Optional[str] = None
    intro: Optional[str] = None
    address: Optional[str] = None


class RestaurantBase(BaseModel):
    cuisine_type: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    phone: Optional[str] = None
    opening_hours: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class RestaurantCreate(RestaurantBase):
    name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)


class RestaurantUpdate(RestaurantBase):
    name: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = Field(None, min_length=1)


class MenuItemCreate(BaseModel):
    restaurant_id: int
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0)
    image_url: Optional[str] = None


class MenuItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    image_url: Optional[str] = None


class ReviewCreate(BaseModel):
    restaurant_id: int
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None
    image_urls: List[str] = []
    dish_names: List[str] = []


class ReviewUpdate(BaseModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    comment: Optional[str] = None
    image_urls: Optional[List[str]] = None
    dish_names: Optional[List[str]] = None


class ReviewStatusUpdate(BaseModel):
    status: Literal["pending", "approved", "rejected"]


class RoleUpdate(BaseModel):
    role: Literal["user", "admin"]


class FavoriteCreate(BaseModel):
    restaurant_id: int


# Response shapes

class UserResponse(BaseModel):
    id: int
    email: str
    name: str
    avatar_url: Optional[str] = None
    intro: Optional[str] = None
    address: Optional[str] = None
    role: str
    account_type: str
    is_blocked: bool = False
    last_active_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserSummary(BaseModel):
    id: int
    name: str
    avatar_url: Optional[str] = None

    class Config:
        from_attributes = True


class RestaurantSummary(BaseModel):
    id: int
    name: str
    address: Optional[str] = None
    image_url: Optional[str] = None

    class Config:
        from_attributes = True


class MenuItem(BaseModel):
    id: int
    restaurant_id: int
    name: str
    description: Optional[str] = None
    price: float
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MenuItemDetail(MenuItem):
    restaurant: Optional[RestaurantSummary] = None


class Review(BaseModel):
    id: int
    user_id: int
    restaurant_id: int
    rating: int
    comment: Optional[str] = None
    image_urls: List[str] = []
    dish_names: List[str] = []
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user: Optional[UserSummary] = None
    like_count: int = 0
    liked_by_viewer: bool = False

    class Config:
        from_attributes = True


class ReviewDetail(Review):
    restaurant: Optional[RestaurantSummary] = None


class Restaurant(BaseModel):
    id: int
    name: str
    address: str
    cuisine_type: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    rating: float = 0.0
    phone: Optional[str] = None
    opening_hours: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class Notification(BaseModel):
    id: int
    user_id: int
    type: str
    reference_id: Optional[int] = None
    message: str
    is_read: bool
    created_at: Optional[datetime] = None
    restaurant: Optional[RestaurantSummary] = None

    class Config:
        from_attributes = True
