"""
Customer API — Resource Registry
=================================

What:  Binds each resource type's ORM model, request/response schemas and URL
       collection name into a single ResourceDefinition.
How:   Routes, repositories and the API description are all generated from the
       entries in RESOURCES. Adding a resource type means adding a model, its
       schemas, and one definition here.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple, Type, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from customer_api.database import Base
from customer_api.exceptions import ValidationError
from customer_api.models.customer import Customer
from customer_api.schemas.customer import CustomerCreate, CustomerResponse, CustomerUpdate

Payload = Union[BaseModel, Mapping[str, Any]]


@dataclass(frozen=True)
class ResourceDefinition:
    """
    Static description of one resource type.

    Attributes:
        name:            Singular name used in messages ("customer")
        collection:      URL path segment and OpenAPI tag source ("customers")
        model:           SQLAlchemy model (one table per resource type)
        create_schema:   Full payload accepted on POST
        update_schema:   Partial payload accepted on PUT/PATCH
        response_schema: Representation returned to clients
    """

    name: str
    collection: str
    model: Type[Base]
    create_schema: Type[BaseModel]
    update_schema: Type[BaseModel]
    response_schema: Type[BaseModel]

    @property
    def tag(self) -> str:
        return self.collection.replace("_", " ").title()

    def validate_create(self, payload: Payload) -> Dict[str, Any]:
        """
        Validate a create payload and return the column values to insert.

        Raises:
            ValidationError: a required field is missing or a value has the
                             wrong type (field-level details attached)
        """
        model = self._validate(self.create_schema, payload)
        return model.model_dump()

    def validate_update(self, payload: Payload) -> Dict[str, Any]:
        """Validate a partial payload and return only the fields it supplied."""
        model = self._validate(self.update_schema, payload)
        return model.model_dump(exclude_unset=True)

    def serialize(self, obj: Any) -> BaseModel:
        return self.response_schema.model_validate(obj)

    def _validate(self, schema: Type[BaseModel], payload: Payload) -> BaseModel:
        if isinstance(payload, schema):
            return payload
        if isinstance(payload, BaseModel):
            payload = payload.model_dump(exclude_unset=True)
        try:
            return schema.model_validate(payload)
        except PydanticValidationError as e:
            raise ValidationError.from_pydantic(
                e, message=f"Invalid {self.name} payload"
            ) from e


customer_resource = ResourceDefinition(
    name="customer",
    collection="customers",
    model=Customer,
    create_schema=CustomerCreate,
    update_schema=CustomerUpdate,
    response_schema=CustomerResponse,
)

# Every resource type served by the application
RESOURCES: Tuple[ResourceDefinition, ...] = (customer_resource,)
