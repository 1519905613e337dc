"""Tests for signing backends."""

import pytest
from eth_account import Account
from eth_account.messages import encode_typed_data

from conftest import TEST_PRIVATE_KEY, WALLET
from swapsettle.config import Settings
from swapsettle.signing import (
    KeyNotFoundError,
    LocalSigner,
    SignerType,
    SigningError,
    create_signer,
)

TYPED_DATA = {
    "types": {
        "EIP712Domain": [
            {"name": "name", "type": "string"},
            {"name": "chainId", "type": "uint256"},
        ],
        "Mail": [{"name": "contents", "type": "string"}],
    },
    "primaryType": "Mail",
    "domain": {"name": "Test", "chainId": 1},
    "message": {"contents": "hello"},
}


class TestLocalSigner:
    """Tests for the in-memory key signer."""

    def test_address(self, signer):
        assert signer.address == Account.from_key(TEST_PRIVATE_KEY).address
        assert signer.signer_type is SignerType.LOCAL

    @pytest.mark.asyncio
    async def test_sign_typed_data(self, signer):
        """Signature recovers to the signer's address."""
        signature = await signer.sign_typed_data(TYPED_DATA)

        assert signature.startswith("0x")
        assert len(signature) == 2 + 130
        recovered = Account.recover_message(
            encode_typed_data(full_message=TYPED_DATA), signature=signature
        )
        assert recovered == signer.address

    @pytest.mark.asyncio
    async def test_sign_transaction(self, signer):
        raw = await signer.sign_transaction(
            {
                "to": WALLET,
                "data": "0x",
                "value": 0,
                "gas": 21000,
                "gasPrice": 1_000_000_000,
                "nonce": 0,
                "chainId": 1,
            }
        )

        assert raw.startswith("0x")
        assert Account.recover_transaction(raw) == signer.address

    @pytest.mark.asyncio
    async def test_bad_payload_raises_signing_error(self, signer):
        with pytest.raises(SigningError):
            await signer.sign_typed_data({"message": {}})

    def test_repr_hides_key(self, signer):
        assert TEST_PRIVATE_KEY[2:] not in repr(signer)
        assert repr(signer) == "LocalSigner(type=local)"

    def test_missing_key(self):
        with pytest.raises(KeyNotFoundError):
            LocalSigner("")

    def test_invalid_key(self):
        with pytest.raises(SigningError):
            LocalSigner("0x1234")


class TestCreateSigner:
    """Tests for the signer factory."""

    def test_configured_key(self):
        signer = create_signer(Settings(signer_private_key=TEST_PRIVATE_KEY))

        assert signer.address == Account.from_key(TEST_PRIVATE_KEY).address

    def test_dry_run_ephemeral_key(self):
        """Dry-run without a key still gets a working signer."""
        first = create_signer(Settings(dry_run=True))
        second = create_signer(Settings(dry_run=True))

        assert first.address != second.address

    def test_live_mode_requires_key(self):
        with pytest.raises(KeyNotFoundError):
            create_signer(Settings(dry_run=False))
