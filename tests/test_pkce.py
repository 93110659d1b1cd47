# tests/test_pkce.py
import pytest

from mcp_promptgate.oauth.pkce import (
    CODE_VERIFIER_LENGTH,
    generate_code_challenge,
    generate_code_verifier,
    is_valid_code_verifier,
)


def test_verifier_has_default_length_and_unreserved_characters():
    verifier = generate_code_verifier()
    assert len(verifier) == CODE_VERIFIER_LENGTH
    assert is_valid_code_verifier(verifier)


def test_verifiers_are_unique():
    assert len({generate_code_verifier() for _ in range(50)}) == 50


@pytest.mark.parametrize("length", [42, 129])
def test_verifier_length_outside_rfc_bounds_is_rejected(length):
    with pytest.raises(ValueError):
        generate_code_verifier(length)


@pytest.mark.parametrize("length", [43, 128])
def test_verifier_length_at_rfc_bounds(length):
    assert len(generate_code_verifier(length)) == length


def test_challenge_matches_rfc_7636_appendix_b():
    verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
    assert generate_code_challenge(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"


def test_challenge_has_no_padding():
    assert "=" not in generate_code_challenge(generate_code_verifier())


def test_invalid_verifiers():
    assert not is_valid_code_verifier("short")
    assert not is_valid_code_verifier("a" * 42 + "!")
