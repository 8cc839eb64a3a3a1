from .accounts import AccountStore
from .customers import CustomerStore
from .field_metadata import FieldMetadataStore
from .integrations import IntegrationStore
from .staging import SendgridStagingStore

__all__ = [
    "AccountStore",
    "CustomerStore",
    "FieldMetadataStore",
    "IntegrationStore",
    "SendgridStagingStore",
]
