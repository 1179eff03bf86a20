"""Tests for PII hashing utilities."""
import pytest

from mindscreen.shared.utils import pii
from mindscreen.shared.utils import configure_pii_salt, hash_pii, hash_text_for_audit


@pytest.fixture(autouse=True)
def setup_pii_salt():
    configure_pii_salt("test_salt_that_is_at_least_32_characters_long")


class TestConfigurePIISalt:

    def test_rejects_short_salt(self):
        with pytest.raises(ValueError):
            configure_pii_salt("too_short")

    def test_rejects_empty_salt(self):
        with pytest.raises(ValueError):
            configure_pii_salt("")


class TestHashPII:

    def test_same_input_same_hash(self):
        assert hash_pii("user_123") == hash_pii("user_123")

    def test_different_inputs_differ(self):
        assert hash_pii("user_123") != hash_pii("user_124")

    def test_hash_is_hex_sha256(self):
        hashed = hash_pii("user_123")
        assert len(hashed) == 64
        assert "user_123" not in hashed

    def test_salt_changes_hash(self):
        before = hash_pii("user_123")
        configure_pii_salt("another_salt_that_is_at_least_32_characters")
        assert hash_pii("user_123") != before

    def test_raises_without_salt(self, monkeypatch):
        monkeypatch.setattr(pii, "_PII_SALT", None)
        with pytest.raises(RuntimeError):
            hash_pii("user_123")


class TestHashTextForAudit:

    def test_none_treated_as_empty(self):
        assert hash_text_for_audit(None) == hash_text_for_audit("")

    def test_does_not_contain_text(self):
        assert "hopeless" not in hash_text_for_audit("I feel hopeless")
