"""
Property-based tests for domain registration.
"""

import asyncio
import tempfile
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from antns.codec import decode_owner
from antns.enums import StorageErrorKind
from antns.exceptions import DomainAlreadyRegisteredError, StorageError, ValidationError
from antns.identity import IdentityDeriver
from antns.keystore import KeyStore
from antns.memory_network import MemoryNetwork
from antns.registrar import Registrar
from antns.signing import DomainKeypair


label_strategy = st.text(
    alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyz0123456789"),
    min_size=1,
    max_size=20,
)


class TestRegistrationProperty:
    """Property-based tests for the registration layout."""

    @given(label=label_strategy, suffix=st.sampled_from([".ant", ".autonomi"]))
    @settings(max_examples=30, deadline=None)
    def test_owner_document_is_first_entry(self, label: str, suffix: str) -> None:
        """
        *For any* new domain, the register at the derived address SHALL hold
        exactly one entry: the owner document naming the owner's public key.
        """
        domain = label + suffix
        network = MemoryNetwork()
        deriver = IdentityDeriver()

        async def scenario():
            registration = await Registrar(network, deriver).register(domain)
            entries = network.register_entries(registration.register_address)
            owner = decode_owner(await network.get_chunk(entries[0]))
            return registration, entries, owner

        registration, entries, owner = asyncio.run(scenario())
        assert registration.register_address == deriver.register_address(domain)
        assert entries == [registration.owner_chunk_address]
        assert owner.public_key == registration.public_key_hex
        assert DomainKeypair.from_private_hex(registration.private_key_hex).public_key_hex == owner.public_key

    def test_domain_is_canonicalised(self) -> None:
        network = MemoryNetwork()
        deriver = IdentityDeriver()
        registration = asyncio.run(Registrar(network, deriver).register("  Alice.ANT "))
        assert registration.domain == "alice.ant"
        assert registration.register_address == deriver.register_address("alice.ant")

    def test_given_keypair_is_used(self) -> None:
        keypair = DomainKeypair.generate()
        registration = asyncio.run(Registrar(MemoryNetwork(), IdentityDeriver()).register("bob.ant", keypair))
        assert registration.public_key_hex == keypair.public_key_hex

    def test_key_is_saved_to_keystore(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            store = KeyStore(Path(tmp))
            registrar = Registrar(MemoryNetwork(), IdentityDeriver(), keystore=store)
            registration = asyncio.run(registrar.register("carol.ant"))
            loaded = store.require_key("carol.ant")
        assert loaded.private_key_hex == registration.private_key_hex


class TestRegistrationErrors:
    """Duplicate, invalid and failed registrations."""

    def test_second_registration_fails(self) -> None:
        network = MemoryNetwork()
        registrar = Registrar(network, IdentityDeriver())

        async def scenario():
            await registrar.register("alice.ant")
            writes = network.write_count
            with pytest.raises(DomainAlreadyRegisteredError):
                await registrar.register("ALICE.ant")
            return writes, network.write_count, await registrar.is_registered("alice.ant")

        before, after, registered = asyncio.run(scenario())
        assert before == after
        assert registered

    @pytest.mark.parametrize("domain", ["", "alice.com", "bad name.ant", "alice"])
    def test_invalid_domains(self, domain: str) -> None:
        with pytest.raises(ValidationError):
            asyncio.run(Registrar(MemoryNetwork(), IdentityDeriver()).register(domain))

    def test_create_failure_propagates(self) -> None:
        network = MemoryNetwork()
        network.inject_failure("create_register", StorageErrorKind.PAYMENT_REQUIRED)
        with pytest.raises(StorageError) as exc_info:
            asyncio.run(Registrar(network, IdentityDeriver()).register("alice.ant"))
        assert exc_info.value.kind == StorageErrorKind.PAYMENT_REQUIRED

    def test_unregistered_domain(self) -> None:
        registrar = Registrar(MemoryNetwork(), IdentityDeriver())
        assert not asyncio.run(registrar.is_registered("nobody.ant"))
