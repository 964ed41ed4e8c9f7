import base64
import json
from datetime import datetime, timezone

import pytest
from qr_emergency.core.errors import DecodeFailure
from qr_emergency.models.profile import Contact, Profile
from qr_emergency.services.profile_codec import ProfileCodec, encode_phone


def make_profile(**overrides):
    data = dict(
        full_name="Asha Rao",
        blood_group="B+",
        emergency_contacts=(
            Contact("Mom", "9876543210"),
            Contact("Dad", "9123456780"),
            Contact("Ravi", "919988776655"),
        ),
        government_helplines=(
            Contact("Emergency", "112"),
            Contact("Ambulance", "108"),
        ),
        created_at=datetime(2024, 3, 5, 10, 30, 15, 123000, tzinfo=timezone.utc),
    )
    data.update(overrides)
    return Profile(**data)


def b64url(payload) -> str:
    text = payload if isinstance(payload, str) else json.dumps(payload)
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")


class TestEncode:
    def setup_method(self):
        self.codec = ProfileCodec()

    def test_token_is_url_safe_without_padding(self):
        token = self.codec.encode(make_profile(full_name="Ãsha ~ Rao ??>>"))
        assert "=" not in token
        assert "+" not in token and "/" not in token

    def test_encode_is_deterministic(self):
        profile = make_profile()
        assert self.codec.encode(profile) == self.codec.encode(profile)

    def test_payload_uses_short_keys(self):
        token = self.codec.encode(make_profile())
        raw = base64.urlsafe_b64decode(token + "=" * (-len(token) % 4))
        payload = json.loads(raw)
        assert set(payload) == {"n", "b", "e", "g", "t"}
        assert payload["e"][0] == {"n": "Mom", "p": "9876543210"}
        assert payload["g"][1] == {"n": "Ambulance", "p": "108"}
        assert payload["t"] == 1709634615123

    def test_different_order_gives_different_token(self):
        p1 = make_profile()
        p2 = make_profile(emergency_contacts=tuple(reversed(p1.emergency_contacts)))
        assert self.codec.encode(p1) != self.codec.encode(p2)


class TestRoundTrip:
    def setup_method(self):
        self.codec = ProfileCodec()

    def test_round_trip_preserves_all_fields(self):
        profile = make_profile()
        assert self.codec.decode(self.codec.encode(profile)) == profile

    def test_round_trip_preserves_order(self):
        profile = make_profile()
        decoded = self.codec.decode(self.codec.encode(profile))
        assert [c.name for c in decoded.emergency_contacts] == ["Mom", "Dad", "Ravi"]
        assert [h.name for h in decoded.government_helplines] == ["Emergency", "Ambulance"]

    def test_round_trip_non_ascii_names(self):
        profile = make_profile(
            full_name="आशा राव",
            emergency_contacts=(Contact("माँ", "9876543210"),),
        )
        assert self.codec.decode(self.codec.encode(profile)) == profile

    def test_sub_millisecond_created_at_round_trips(self):
        profile = make_profile(created_at=datetime(2024, 3, 5, 10, 30, 15, 123456, tzinfo=timezone.utc))
        assert profile.created_at.microsecond == 123000
        assert self.codec.decode(self.codec.encode(profile)) == profile

    def test_decoded_timestamp_is_utc(self):
        decoded = self.codec.decode(self.codec.encode(make_profile()))
        assert decoded.created_at.tzinfo is not None
        assert decoded.created_at.utcoffset().total_seconds() == 0


class TestDecodeRobustness:
    """Decoding untrusted text must never raise."""

    def setup_method(self):
        self.codec = ProfileCodec()

    @pytest.mark.parametrize(
        "token",
        [
            "",
            "hello world",
            "not/a+token==",
            "0123456789abcdef0123456789abcdef",
            "e3Jk",
            "a",
            "%%%%",
            "eyJuIjoiQXNoYSJ9",  # {"n":"Asha"}
        ],
    )
    def test_garbage_yields_decode_failure(self, token):
        assert isinstance(self.codec.decode(token), DecodeFailure)

    def test_truncated_token(self):
        token = self.codec.encode(make_profile())
        for cut in (1, 2, 3, 5, len(token) // 2):
            assert isinstance(self.codec.decode(token[:-cut]), DecodeFailure)

    def test_none_input(self):
        assert isinstance(self.codec.decode(None), DecodeFailure)

    def test_non_object_json(self):
        assert isinstance(self.codec.decode(b64url([1, 2, 3])), DecodeFailure)
        assert isinstance(self.codec.decode(b64url("42")), DecodeFailure)

    def test_invalid_utf8(self):
        token = base64.urlsafe_b64encode(b"\xff\xfe\xfd").decode("ascii").rstrip("=")
        assert self.codec.decode(token) == DecodeFailure("payload is not utf-8")

    def test_missing_subfields(self):
        good = {"n": "A", "b": "O+", "e": [{"n": "Mom", "p": "1"}], "g": [{"n": "112", "p": "112"}], "t": 1}
        assert not isinstance(self.codec.decode(b64url(good)), DecodeFailure)
        for key in good:
            broken = {k: v for k, v in good.items() if k != key}
            assert isinstance(self.codec.decode(b64url(broken)), DecodeFailure), key

    def test_empty_contact_list(self):
        payload = {"n": "A", "b": "O+", "e": [], "g": [{"n": "112", "p": "112"}], "t": 1}
        assert self.codec.decode(b64url(payload)) == DecodeFailure("invalid emergency contacts")

    def test_contact_without_phone(self):
        payload = {"n": "A", "b": "O+", "e": [{"n": "Mom"}], "g": [{"n": "112", "p": "112"}], "t": 1}
        assert isinstance(self.codec.decode(b64url(payload)), DecodeFailure)

    def test_boolean_timestamp_rejected(self):
        payload = {"n": "A", "b": "O+", "e": [{"n": "M", "p": "1"}], "g": [{"n": "E", "p": "112"}], "t": True}
        assert self.codec.decode(b64url(payload)) == DecodeFailure("invalid timestamp")

    def test_huge_timestamp_rejected(self):
        payload = {"n": "A", "b": "O+", "e": [{"n": "M", "p": "1"}], "g": [{"n": "E", "p": "112"}], "t": 10**30}
        assert self.codec.decode(b64url(payload)) == DecodeFailure("invalid timestamp")

    def test_deeply_nested_json(self):
        assert isinstance(self.codec.decode(b64url("[" * 100000)), DecodeFailure)


def test_legacy_token_detection():
    assert ProfileCodec.is_legacy_token("0123456789abcdef0123456789abcdef")
    assert not ProfileCodec.is_legacy_token("0123456789ABCDEF0123456789ABCDEF")
    assert not ProfileCodec.is_legacy_token(ProfileCodec().encode(make_profile()))


def test_encode_phone_is_standard_base64():
    assert encode_phone("9876543210") == "OTg3NjU0MzIxMA=="
    assert base64.b64decode(encode_phone("112")).decode() == "112"
