"""
Property-based tests for key backup and restore through the vault.
"""

import asyncio
import json
import tempfile
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from antns.enums import StorageErrorKind
from antns.exceptions import StorageError, VaultError
from antns.keystore import KeyStore
from antns.memory_network import MemoryNetwork
from antns.models import KeysBackup
from antns.signing import DomainKeypair
from antns.vault import CONTENT_TYPE, KeyVault, decode_backup, derive_vault_key, encode_backup


domain_strategy = st.builds(
    lambda label, suffix: f"{label}.{suffix}",
    st.text(alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyz"), min_size=1, max_size=12),
    st.sampled_from(["ant", "autonomi"]),
)


class TestBackupRestoreProperty:
    """Property-based tests for moving keys through the vault."""

    @given(domains=st.lists(domain_strategy, min_size=0, max_size=5, unique=True))
    @settings(max_examples=20, deadline=None)
    def test_restore_recovers_backed_up_keys(self, domains: list[str]) -> None:
        """
        *For any* set of local keys, backing up and restoring into an empty
        key store SHALL reproduce every key.
        """
        network = MemoryNetwork()

        with tempfile.TemporaryDirectory() as tmp:
            source = KeyStore(Path(tmp) / "source")
            for domain in domains:
                source.save_key(domain, DomainKeypair.generate())
            target = KeyStore(Path(tmp) / "target")

            async def scenario():
                await KeyVault(network, source, "wallet-secret").backup()
                return await KeyVault(network, target, "wallet-secret").restore()

            restored = asyncio.run(scenario())
            source_keys = source.export_keys()
            target_keys = target.export_keys()

        assert restored == sorted(domains)
        assert target_keys == source_keys

    @given(secret=st.text(min_size=1, max_size=40))
    @settings(max_examples=100)
    def test_vault_key_is_deterministic(self, secret: str) -> None:
        """*For any* wallet secret, the derived vault key SHALL be stable 64-char hex."""
        key = derive_vault_key(secret)
        assert key == derive_vault_key(secret)
        assert len(key) == 64
        int(key, 16)

    def test_different_secrets_use_different_slots(self) -> None:
        assert derive_vault_key("one") != derive_vault_key("two")

    def test_backup_is_stored_with_content_type(self) -> None:
        network = MemoryNetwork()
        with tempfile.TemporaryDirectory() as tmp:
            store = KeyStore(Path(tmp))
            keypair = DomainKeypair.generate()
            store.save_key("alice.ant", keypair)
            backup = asyncio.run(KeyVault(network, store, "s3cret").backup())
            raw = asyncio.run(network.get_vault(derive_vault_key("s3cret")))

        payload = json.loads(raw)
        assert payload["keys"] == {"alice.ant": keypair.private_key_hex}
        assert payload["version"] == 1
        assert payload["created_at"] == backup.created_at
        assert CONTENT_TYPE == "antns_keys"

    def test_restore_overwrites_local_key(self) -> None:
        network = MemoryNetwork()
        backed_up = DomainKeypair.generate()
        with tempfile.TemporaryDirectory() as tmp:
            store = KeyStore(Path(tmp))
            store.save_key("alice.ant", backed_up)
            vault = KeyVault(network, store, "s3cret")
            asyncio.run(vault.backup())
            store.save_key("alice.ant", DomainKeypair.generate())
            asyncio.run(vault.restore())
            loaded = store.require_key("alice.ant")

        assert loaded.private_key_hex == backed_up.private_key_hex


class TestVaultErrors:
    """Missing secrets, missing backups and malformed payloads."""

    def test_empty_secret_is_rejected(self) -> None:
        with pytest.raises(VaultError) as exc_info:
            derive_vault_key("")
        assert exc_info.value.code == "missing_secret"

    def test_missing_backup(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            vault = KeyVault(MemoryNetwork(), KeyStore(Path(tmp)), "s3cret")
            with pytest.raises(StorageError) as exc_info:
                asyncio.run(vault.fetch())
        assert exc_info.value.kind == StorageErrorKind.NOT_FOUND

    @pytest.mark.parametrize(
        "payload, code",
        [
            (b"\xff\xfe", "invalid_utf8"),
            (b"{not json", "invalid_json"),
            (b"[]", "schema_mismatch"),
            (b'{"keys": [], "created_at": "x", "version": 1}', "schema_mismatch"),
            (b'{"keys": {"a.ant": 1}, "created_at": "x", "version": 1}', "schema_mismatch"),
            (b'{"keys": {}, "version": 1}', "schema_mismatch"),
            (b'{"keys": {}, "created_at": "x", "version": true}', "schema_mismatch"),
        ],
    )
    def test_malformed_payloads(self, payload: bytes, code: str) -> None:
        with pytest.raises(VaultError) as exc_info:
            decode_backup(payload)
        assert exc_info.value.code == code

    def test_backup_with_unusable_key(self) -> None:
        network = MemoryNetwork()
        bad = KeysBackup(keys={"alice.ant": "not-a-key"}, created_at="2026-01-01T00:00:00+00:00")
        asyncio.run(network.put_vault(derive_vault_key("s3cret"), CONTENT_TYPE, encode_backup(bad)))

        with tempfile.TemporaryDirectory() as tmp:
            vault = KeyVault(network, KeyStore(Path(tmp)), "s3cret")
            with pytest.raises(VaultError) as exc_info:
                asyncio.run(vault.restore())
        assert exc_info.value.code == "invalid_backup_key"

    def test_encode_decode_keeps_fields(self) -> None:
        backup = KeysBackup(keys={"bücher.ant": "ab" * 32}, created_at="2026-01-01T00:00:00+00:00")
        assert decode_backup(encode_backup(backup)) == backup

    @pytest.mark.parametrize("domain", ["../evil.ant", "alice.com", "", "a b.ant", "sub/dir.ant"])
    def test_backup_with_invalid_domain_writes_nothing(self, domain: str) -> None:
        network = MemoryNetwork()
        keys = {"alice.ant": DomainKeypair.generate().private_key_hex, domain: DomainKeypair.generate().private_key_hex}
        backup = KeysBackup(keys=keys, created_at="2026-01-01T00:00:00+00:00")
        asyncio.run(network.put_vault(derive_vault_key("s3cret"), CONTENT_TYPE, encode_backup(backup)))

        with tempfile.TemporaryDirectory() as tmp:
            store = KeyStore(Path(tmp) / "keys")
            with pytest.raises(VaultError) as exc_info:
                asyncio.run(KeyVault(network, store, "s3cret").restore())
            listed = store.list_domains()

        assert exc_info.value.code == "invalid_backup_domain"
        assert listed == []

    def test_restore_canonicalises_domain_names(self) -> None:
        network = MemoryNetwork()
        keypair = DomainKeypair.generate()
        backup = KeysBackup(keys={"Alice.ANT.": keypair.private_key_hex}, created_at="2026-01-01T00:00:00+00:00")
        asyncio.run(network.put_vault(derive_vault_key("s3cret"), CONTENT_TYPE, encode_backup(backup)))

        with tempfile.TemporaryDirectory() as tmp:
            store = KeyStore(Path(tmp))
            restored = asyncio.run(KeyVault(network, store, "s3cret").restore())
            loaded = store.load_key("alice.ant")

        assert restored == ["alice.ant"]
        assert loaded.public_key_hex == keypair.public_key_hex
