import unittest

from app.core.errors import (
    CatalogError,
    Forbidden,
    InvalidFilterField,
    NetworkError,
    NotFound,
    RemoteFailure,
    Unauthorized,
    ValidationError,
    error_from_status,
)


class ErrorTests(unittest.TestCase):
    def test_status_mapping(self):
        self.assertIsInstance(error_from_status(400), ValidationError)
        self.assertIsInstance(error_from_status(422), ValidationError)
        self.assertIsInstance(error_from_status(401), Unauthorized)
        self.assertIsInstance(error_from_status(403), Forbidden)
        self.assertIsInstance(error_from_status(404), NotFound)
        self.assertIsInstance(error_from_status(409), RemoteFailure)
        self.assertIsInstance(error_from_status(503), RemoteFailure)

    def test_default_messages(self):
        self.assertEqual(error_from_status(404).message, "Not found")
        self.assertEqual(NetworkError().message, "Network request failed")
        self.assertEqual(CatalogError().status_code, 500)

    def test_payload(self):
        self.assertEqual(NotFound("Kit not found").to_payload(), {"error": "Kit not found"})
        error = ValidationError("Unknown fields: x", details={"fields": ["x"]})
        self.assertEqual(error.to_payload(), {"error": "Unknown fields: x", "details": {"fields": ["x"]}})

    def test_invalid_filter_field(self):
        error = InvalidFilterField("bogus", table="series")
        self.assertIsInstance(error, ValidationError)
        self.assertEqual(error.status_code, 400)
        self.assertEqual(error.message, 'Field "bogus" cannot be filtered on "series"')
        self.assertEqual(error.details, {"field": "bogus"})
        self.assertEqual(InvalidFilterField("bogus").message, 'Field "bogus" cannot be filtered')


if __name__ == "__main__":
    unittest.main()
