from pydantic import AliasChoices, BaseModel, Field


class Address(BaseModel):
    """Structured US postal address as entered by a customer"""

    street: str
    city: str
    state: str
    zip_code: str = Field(
        validation_alias=AliasChoices("zipCode", "zip_code"), serialization_alias="zipCode"
    )

    class Config:
        frozen = True


class ValidationResult(BaseModel):
    is_valid: bool
    errors: dict[str, str] = {}

    @classmethod
    def from_errors(cls, errors: dict[str, str]) -> "ValidationResult":
        return cls(is_valid=not errors, errors=errors)


class State(BaseModel):
    code: str
    name: str
