import unittest

from pcapview import QueryState, ValidationError


class QueryStateTest(unittest.TestCase):
    def test_defaults(self) -> None:
        query = QueryState()
        self.assertEqual((query.page, query.limit, query.filter_text, query.total_pages), (1, 10, "", 1))

    def test_page_is_clamped_to_known_range(self) -> None:
        query = QueryState(total_pages=3)

        self.assertTrue(query.set_page(7))
        self.assertEqual(query.page, 3)
        self.assertTrue(query.set_page(-4))
        self.assertEqual(query.page, 1)

    def test_setting_current_page_is_not_a_change(self) -> None:
        query = QueryState(total_pages=3, page=2)

        self.assertFalse(query.set_page(2))
        # 9 clamps to 3, which differs from 2.
        self.assertTrue(query.set_page(9))
        self.assertFalse(query.set_page(9))

    def test_non_integer_page_is_rejected(self) -> None:
        query = QueryState()
        with self.assertRaises(ValidationError):
            query.set_page("2")  # type: ignore[arg-type]
        with self.assertRaises(ValidationError):
            query.set_page(True)

    def test_invalid_limit_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            QueryState(limit=0)

    def test_update_total_pages_clamps_current_page(self) -> None:
        query = QueryState(total_pages=5, page=5)

        self.assertTrue(query.update_total_pages(2))
        self.assertEqual(query.page, 2)
        self.assertFalse(query.update_total_pages(0))
        self.assertEqual(query.total_pages, 1)
        self.assertEqual(query.page, 1)

    def test_filter_text_change(self) -> None:
        query = QueryState()

        self.assertTrue(query.set_filter_text("tcp"))
        self.assertFalse(query.set_filter_text("tcp"))
        self.assertTrue(query.set_filter_text(""))


if __name__ == "__main__":
    unittest.main()
