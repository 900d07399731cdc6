"""Unit tests for gatekeeper.stores.pagination."""

import unittest

from gatekeeper.stores.pagination import DEFAULT_PAGE_SIZE, PageRequest, page_request


class TestPageRequest(unittest.TestCase):
    def test_offset_is_page_times_size(self) -> None:
        req = PageRequest(page=2, page_size=10)
        self.assertEqual(req.offset, 20)
        self.assertEqual(req.limit, 10)

    def test_defaults(self) -> None:
        self.assertEqual(page_request(), PageRequest(0, DEFAULT_PAGE_SIZE))

    def test_negative_page_becomes_zero(self) -> None:
        self.assertEqual(page_request(-3, 5).page, 0)

    def test_non_positive_size_uses_default(self) -> None:
        self.assertEqual(page_request(1, 0).page_size, DEFAULT_PAGE_SIZE)
        self.assertEqual(page_request(1, -5).page_size, DEFAULT_PAGE_SIZE)

    def test_malformed_values(self) -> None:
        req = page_request("abc", "x1", default_page_size=25)
        self.assertEqual(req, PageRequest(0, 25))

    def test_numeric_strings(self) -> None:
        self.assertEqual(page_request(" 3 ", "7"), PageRequest(3, 7))

    def test_booleans_are_not_numbers(self) -> None:
        self.assertEqual(page_request(True, True, default_page_size=9), PageRequest(0, 9))


if __name__ == "__main__":
    unittest.main()
