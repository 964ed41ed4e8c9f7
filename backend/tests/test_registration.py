import pytest
from qr_emergency.core.errors import ProfileValidationError
from qr_emergency.services.aux_store import AuxiliaryStore
from qr_emergency.services.profile_codec import ProfileCodec
from qr_emergency.services.registration import RegistrationService
from qr_emergency.services.validation import (
    INVALID_EMERGENCY_CONTACT,
    INVALID_GOVERNMENT_HELPLINE,
    MISSING_FIELDS,
    NO_EMERGENCY_CONTACTS,
    NO_GOVERNMENT_HELPLINES,
    PhonePolicy,
    PhoneValidation,
    clean_phone_number,
    validate_registration,
)


class TestValidation:
    def test_normalizes_fields(self, raw_profile):
        profile = validate_registration(raw_profile)
        assert profile.full_name == "Asha Rao"
        assert profile.blood_group == "B+"
        assert profile.emergency_contacts[0].phone == "9876543210"
        assert profile.government_helplines[0].phone == "112"

    def test_created_at_has_millisecond_precision(self, raw_profile):
        profile = validate_registration(raw_profile)
        assert profile.created_at.microsecond % 1000 == 0

    @pytest.mark.parametrize("field", ["fullName", "bloodGroup"])
    def test_missing_required_field(self, raw_profile, field):
        raw_profile[field] = "   "
        with pytest.raises(ProfileValidationError) as exc:
            validate_registration(raw_profile)
        assert str(exc.value) == MISSING_FIELDS

    def test_zero_emergency_contacts_rejected(self, raw_profile):
        raw_profile["emergencyContacts"] = []
        with pytest.raises(ProfileValidationError) as exc:
            validate_registration(raw_profile)
        assert str(exc.value) == NO_EMERGENCY_CONTACTS

    def test_contacts_must_be_a_list(self, raw_profile):
        raw_profile["emergencyContacts"] = "Mom 9876543210"
        with pytest.raises(ProfileValidationError, match="At least one emergency contact"):
            validate_registration(raw_profile)

    def test_zero_helplines_rejected(self, raw_profile):
        del raw_profile["governmentHelplines"]
        with pytest.raises(ProfileValidationError) as exc:
            validate_registration(raw_profile)
        assert str(exc.value) == NO_GOVERNMENT_HELPLINES

    def test_contact_missing_phone_rejected(self, raw_profile):
        raw_profile["emergencyContacts"] = [{"name": "Mom"}]
        with pytest.raises(ProfileValidationError) as exc:
            validate_registration(raw_profile)
        assert str(exc.value) == INVALID_EMERGENCY_CONTACT

    def test_helpline_missing_name_rejected(self, raw_profile):
        raw_profile["governmentHelplines"] = [{"number": "112"}]
        with pytest.raises(ProfileValidationError) as exc:
            validate_registration(raw_profile)
        assert str(exc.value) == INVALID_GOVERNMENT_HELPLINE

    def test_messages_are_distinct(self):
        messages = {
            MISSING_FIELDS,
            NO_EMERGENCY_CONTACTS,
            NO_GOVERNMENT_HELPLINES,
            INVALID_EMERGENCY_CONTACT,
            INVALID_GOVERNMENT_HELPLINE,
        }
        assert len(messages) == 5

    def test_first_failure_wins(self):
        raw = {"fullName": "", "emergencyContacts": [], "governmentHelplines": []}
        with pytest.raises(ProfileValidationError, match="Missing required fields"):
            validate_registration(raw)

    def test_contacts_checked_before_helplines(self, raw_profile):
        raw_profile["emergencyContacts"] = [{"name": "Mom", "phone": ""}]
        raw_profile["governmentHelplines"] = [{"name": "", "number": ""}]
        with pytest.raises(ProfileValidationError) as exc:
            validate_registration(raw_profile)
        assert str(exc.value) == INVALID_EMERGENCY_CONTACT

    def test_helpline_phone_alias(self, raw_profile):
        raw_profile["governmentHelplines"] = [{"name": "Police", "phone": "100"}]
        profile = validate_registration(raw_profile)
        assert profile.government_helplines[0].phone == "100"

    def test_numeric_helpline_number(self, raw_profile):
        raw_profile["governmentHelplines"] = [{"name": "Police", "number": 100}]
        assert validate_registration(raw_profile).government_helplines[0].phone == "100"

    def test_unencodable_name_rejected(self, raw_profile):
        raw_profile["fullName"] = "Asha \ud800"
        with pytest.raises(ProfileValidationError) as exc:
            validate_registration(raw_profile)
        assert str(exc.value) == MISSING_FIELDS

    def test_unencodable_contact_name_rejected(self, raw_profile):
        raw_profile["emergencyContacts"] = [{"name": "Mo\udc00m", "phone": "9876543210"}]
        with pytest.raises(ProfileValidationError) as exc:
            validate_registration(raw_profile)
        assert str(exc.value) == INVALID_EMERGENCY_CONTACT

    def test_non_mapping_body(self):
        with pytest.raises(ProfileValidationError, match="Missing required fields"):
            validate_registration(["Asha"])


class TestPhonePolicy:
    def test_clean_phone_number(self):
        assert clean_phone_number("+91 (987) 654-3210") == "919876543210"

    def test_permissive_accepts_short_numbers(self):
        policy = PhonePolicy()
        assert policy.is_valid("112")
        assert not policy.is_valid("call mom")

    def test_strict_digit_range(self):
        policy = PhonePolicy(mode=PhoneValidation.STRICT)
        assert policy.is_valid("98765 43210")
        assert policy.is_valid("+91 98765 43210")
        assert not policy.is_valid("112")
        assert not policy.is_valid("1" * 14)

    def test_strict_applies_to_helplines(self, raw_profile):
        with pytest.raises(ProfileValidationError) as exc:
            validate_registration(raw_profile, PhonePolicy(mode=PhoneValidation.STRICT))
        assert str(exc.value) == INVALID_GOVERNMENT_HELPLINE

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            PhonePolicy(mode="lenient")


class TestRegistrationService:
    def setup_method(self):
        self.store = AuxiliaryStore()
        self.codec = ProfileCodec()

    def test_register_returns_token_and_urls(self, raw_profile):
        service = RegistrationService(self.store, self.codec)
        result = service.register(raw_profile)
        assert result.public_url == f"/scan/{result.token}"
        assert result.qr_image_url == f"/api/qr/{result.token}"
        assert self.codec.decode(result.token) == result.profile

    def test_register_without_mirror_leaves_store_empty(self, raw_profile):
        service = RegistrationService(self.store, self.codec, mirror_to_store=False)
        service.register(raw_profile)
        assert self.store.stats()["totalUsers"] == 0

    def test_register_with_mirror(self, raw_profile):
        service = RegistrationService(self.store, self.codec, mirror_to_store=True)
        result = service.register(raw_profile)
        assert self.store.get_profile(result.token) == result.profile

    def test_invalid_input_not_mirrored(self, raw_profile):
        service = RegistrationService(self.store, self.codec, mirror_to_store=True)
        raw_profile["emergencyContacts"] = []
        with pytest.raises(ProfileValidationError):
            service.register(raw_profile)
        assert self.store.stats()["totalUsers"] == 0

    def test_to_dict(self, raw_profile):
        result = RegistrationService(self.store).register(raw_profile)
        assert set(result.to_dict()) == {"token", "publicUrl", "qrImageUrl"}
