from django.test import SimpleTestCase

from biometrics.services.config import MatchingConfig, MODE_REGISTRATION, MODE_VERIFICATION
from biometrics.services.validator import validate_image_blob, OK, MALFORMED_BLOB, INSUFFICIENT_QUALITY
from .factories import B64, jpeg_blob, payload


class ValidateImageBlobTest(SimpleTestCase):

    def test_valid_capture_in_both_modes(self):
        blob = jpeg_blob(1)
        for mode in (MODE_REGISTRATION, MODE_VERIFICATION):
            v = validate_image_blob(blob, mode)
            self.assertTrue(v.valid, v.reason)
            self.assertEqual(v.code, OK)
            self.assertEqual(v.score, 1.0)
            self.assertEqual(v.blob.detected_format, "jpeg")

    def test_not_a_data_url(self):
        v = validate_image_blob("hello", MODE_VERIFICATION)
        self.assertFalse(v.valid)
        self.assertEqual(v.code, MALFORMED_BLOB)
        self.assertEqual(v.score, 0.0)
        self.assertIn("not a data URL", v.reason)

    def test_empty_and_non_string(self):
        for blob in ("", None, 42):
            v = validate_image_blob(blob, MODE_REGISTRATION)
            self.assertFalse(v.valid)
            self.assertEqual(v.code, MALFORMED_BLOB)

    def test_missing_base64_marker(self):
        v = validate_image_blob("data:image/jpeg," + payload(2), MODE_VERIFICATION)
        self.assertEqual(v.code, MALFORMED_BLOB)

    def test_short_payload_rejected(self):
        v = validate_image_blob(jpeg_blob(3, length=1000), MODE_VERIFICATION)
        self.assertFalse(v.valid)
        self.assertEqual(v.code, INSUFFICIENT_QUALITY)
        self.assertIn("data length", v.reason)

    def test_registration_stricter_on_length(self):
        blob = jpeg_blob(4, length=17000)
        self.assertTrue(validate_image_blob(blob, MODE_VERIFICATION).valid)
        self.assertEqual(validate_image_blob(blob, MODE_REGISTRATION).code, INSUFFICIENT_QUALITY)

    def test_signature_checked_only_at_registration(self):
        blob = "data:image/jpeg;base64," + payload(5, signature="QUFB")
        self.assertTrue(validate_image_blob(blob, MODE_VERIFICATION).valid)
        v = validate_image_blob(blob, MODE_REGISTRATION)
        self.assertFalse(v.valid)
        self.assertIn("header", v.reason)
        self.assertIn("got 'QUFB", v.reason)
        self.assertTrue(v.header_prefix.startswith("QUFB"))

    def test_png_signature_accepted(self):
        blob = "data:image/png;base64," + payload(6, signature="iVBOR")
        v = validate_image_blob(blob, MODE_REGISTRATION)
        self.assertTrue(v.valid, v.reason)
        self.assertEqual(v.blob.detected_format, "png")

    def test_low_complexity_rejected(self):
        blob = "data:image/jpeg;base64,/9j/" + "ABCD" * 6000
        v = validate_image_blob(blob, MODE_VERIFICATION)
        self.assertFalse(v.valid)
        self.assertEqual(v.code, INSUFFICIENT_QUALITY)
        self.assertIn("complexity", v.reason)

    def test_low_entropy_rejected(self):
        # les 64 symboles présents, mais écrasés par un seul caractère répété
        blob = "data:image/jpeg;base64," + B64 + "A" * 20000
        v = validate_image_blob(blob, MODE_VERIFICATION)
        self.assertFalse(v.valid)
        self.assertEqual(v.code, INSUFFICIENT_QUALITY)
        self.assertIn("Image entropy too low: 0.05", v.reason)
        self.assertLess(v.score, 0.01)

    def test_entropy_floor_disabled_at_zero(self):
        blob = "data:image/jpeg;base64," + B64 + "A" * 20000
        cfg = MatchingConfig().with_overrides(min_entropy=0.0)
        self.assertTrue(validate_image_blob(blob, MODE_VERIFICATION, cfg).valid)

    def test_header_prefix_follows_configured_length(self):
        blob = jpeg_blob(8)
        head = blob.split("base64,", 1)[1]
        self.assertEqual(validate_image_blob(blob, MODE_VERIFICATION).header_prefix, head[:16])
        cfg = MatchingConfig().with_overrides(header_prefix_length=4)
        self.assertEqual(validate_image_blob(blob, MODE_REGISTRATION, cfg).header_prefix, "/9j/")
        self.assertEqual(validate_image_blob("hello", MODE_VERIFICATION, cfg).header_prefix, "")

    def test_unknown_mode_is_caller_error(self):
        with self.assertRaises(ValueError):
            validate_image_blob(jpeg_blob(7), "enrollment")
