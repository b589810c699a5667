"""Organization (employer) profile as read from the record store."""

from typing import Literal

from pydantic import BaseModel

from models.schemas.candidate import ApprovalStatus

CompanySize = Literal["startup", "small", "medium", "large", "enterprise"]


class OrganizationProfile(BaseModel):
    id: str
    company_name: str = ""
    industry: str = ""
    company_size: CompanySize | None = None
    location: str = ""
    description: str = ""
    status: ApprovalStatus = "pending"
