"""Pydantic schemas for Signup API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from domain.entities.link import Link


class LinkIn(BaseModel):
    """One link row as submitted by the form.

    Both fields are free text: rows that are unlabeled or not a URL are
    dropped by the service, never rejected.
    """

    label: str = ""
    link: str = ""

    def to_entity(self) -> Link:
        return Link(label=self.label, url=self.link)


class LinkOut(BaseModel):
    """Schema for a stored link."""

    label: str
    link: str


class SignupCreate(BaseModel):
    """Schema for starting a paid signup."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "username": "@alice",
                "catchphrase": "hello from the wall",
                "links": [{"label": "site", "link": "https://alice.dev"}],
            }
        },
    )

    username: str = Field("", max_length=100)
    catchphrase: str = Field("", max_length=500)
    links: list[LinkIn] = Field(default_factory=list, max_length=20)


class SignupCheckoutResponse(BaseModel):
    """What the client needs to confirm payment."""

    payment_reference: str
    client_secret: str
    username: str


class SignupCheckoutDetailResponse(BaseModel):
    """Schema for a created pending signup."""

    data: SignupCheckoutResponse


class SignupComplete(BaseModel):
    """Schema for promoting a paid signup."""

    payment_reference: str = Field(..., min_length=1, max_length=255)


class CompletedProfileResponse(BaseModel):
    """Schema for a freshly promoted profile."""

    username: str
    catchphrase: str
    links: list[LinkOut]
    created_at: datetime


class CompletedProfileDetailResponse(BaseModel):
    """Schema for a single promoted profile."""

    message: str = "Profile saved"
    data: CompletedProfileResponse
