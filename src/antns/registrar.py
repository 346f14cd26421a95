"""
Domain registration.

Registering a domain publishes an owner document and creates the domain's
register at its derived identity with that document as entry #1.
"""

from typing import Optional

from .audit_logger import AuditLogger
from .codec import encode_owner
from .domain_validator import DomainValidator
from .enums import LogLevel, StorageErrorKind
from .exceptions import DomainAlreadyRegisteredError, StorageError
from .identity import IdentityDeriver
from .keystore import KeyStore
from .models import DomainOwnerDocument, DomainRegistration
from .signing import DomainKeypair
from .storage import NetworkStorage


class Registrar:
    """Creates new domain registers."""

    COMPONENT = "registrar"

    def __init__(
        self,
        storage: NetworkStorage,
        deriver: IdentityDeriver,
        validator: Optional[DomainValidator] = None,
        keystore: Optional[KeyStore] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        self._storage = storage
        self._deriver = deriver
        self._validator = validator or DomainValidator()
        self._keystore = keystore
        self._logger = logger

    def _log_info(self, message: str, data: Optional[dict] = None) -> None:
        if self._logger:
            self._logger.log(LogLevel.INFO, self.COMPONENT, message, data)

    async def is_registered(self, domain: str) -> bool:
        """True if the domain's register already has at least one entry."""
        address = self._deriver.register_address(domain)
        history = self._storage.register_history(address)
        return await history.next() is not None

    async def register(
        self,
        raw_domain: str,
        keypair: Optional[DomainKeypair] = None,
    ) -> DomainRegistration:
        """
        Register a domain under a new (or given) owner keypair.

        Args:
            raw_domain: Domain as entered by the user
            keypair: Owner keypair; a fresh one is generated if omitted

        Returns:
            DomainRegistration with the register address and owner key

        Raises:
            ValidationError: If the domain name is invalid
            DomainAlreadyRegisteredError: If the register already exists
            StorageError: If publishing fails
        """
        domain = self._validator.canonicalize(raw_domain)
        identity = self._deriver.derive(domain)

        if await self.is_registered(domain):
            raise DomainAlreadyRegisteredError(
                code="already_registered",
                message=f"Domain {domain} is already registered",
                details={"domain": domain, "register_address": identity.address},
            )

        owner_keypair = keypair or DomainKeypair.generate()
        owner_doc = DomainOwnerDocument(public_key=owner_keypair.public_key_hex)
        chunk_address = await self._storage.put_chunk(encode_owner(owner_doc))

        try:
            register_address = await self._storage.create_register(identity, chunk_address)
        except StorageError as e:
            if e.kind == StorageErrorKind.ALREADY_EXISTS:
                raise DomainAlreadyRegisteredError(
                    code="already_registered",
                    message=f"Domain {domain} is already registered",
                    details={"domain": domain, "register_address": identity.address},
                )
            raise

        if self._keystore is not None:
            self._keystore.save_key(domain, owner_keypair)

        self._log_info(
            "Domain registered",
            {"domain": domain, "register_address": register_address},
        )
        return DomainRegistration(
            domain=domain,
            register_address=register_address,
            owner_chunk_address=chunk_address,
            private_key_hex=owner_keypair.private_key_hex,
            public_key_hex=owner_keypair.public_key_hex,
        )
