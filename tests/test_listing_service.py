import unittest
from datetime import datetime, timezone

from bucket_gallery.models.listing import EPOCH
from bucket_gallery.services import listing_service
from bucket_gallery.services.listing_service import ListingParseError, resolve

from tests.listings import listing_xml


class TestResolve(unittest.TestCase):
    def test_single_image_from_document_url_with_query(self) -> None:
        doc = listing_xml([("photos/a.png", "2024-01-01T00:00:00Z"), ("notes.txt", "2024-05-01T00:00:00Z")])
        records = resolve(doc, "https://bucket.s3.amazonaws.com/list.xml?x=1")

        self.assertEqual(len(records), 1)
        self.assertEqual(records[0].url, "https://bucket.s3.amazonaws.com/photos/a.png")
        self.assertEqual(records[0].last_modified, datetime(2024, 1, 1, tzinfo=timezone.utc))
        self.assertEqual(records[0].key, "photos/a.png")

    def test_newest_first(self) -> None:
        doc = listing_xml([("b.jpg", "2024-02-01T00:00:00.000Z"), ("a.jpg", "2024-03-01T00:00:00.000Z")])
        records = resolve(doc, "https://bucket.s3.amazonaws.com/")
        self.assertEqual([r.key for r in records], ["a.jpg", "b.jpg"])

    def test_extension_filter_is_case_insensitive(self) -> None:
        keys = ["a.JPG", "b.jpeg", "c.Png", "d.gif", "e.BMP", "f.webp", "g.tiff", "h.mp4", "folder/", "jpg", "i.jpg.txt"]
        doc = listing_xml([(k, None) for k in keys])
        records = resolve(doc, "https://example.com/")
        self.assertEqual([r.key for r in records], ["a.JPG", "b.jpeg", "c.Png", "d.gif", "e.BMP", "f.webp"])

    def test_missing_or_bad_timestamps_sort_last_in_listing_order(self) -> None:
        doc = listing_xml([
            ("undated1.jpg", None),
            ("old.jpg", "1969-06-01T00:00:00Z"),
            ("garbage.jpg", "not a date"),
            ("new.jpg", "2023-01-01T00:00:00Z"),
            ("undated2.jpg", None),
        ])
        records = resolve(doc, "https://example.com/")

        self.assertEqual(
            [r.key for r in records],
            ["new.jpg", "old.jpg", "undated1.jpg", "garbage.jpg", "undated2.jpg"],
        )
        self.assertEqual(records[-1].last_modified, EPOCH)

    def test_short_fraction_keeps_its_timestamp(self) -> None:
        doc = listing_xml([("later.jpg", "2024-01-01T00:00:00.5Z"), ("earlier.jpg", "2024-01-01T00:00:00.25Z")])
        records = resolve(doc, "https://example.com/")
        self.assertEqual([r.key for r in records], ["later.jpg", "earlier.jpg"])
        self.assertNotEqual(records[1].last_modified, EPOCH)

    def test_equal_timestamps_keep_listing_order(self) -> None:
        ts = "2024-01-01T00:00:00Z"
        doc = listing_xml([("z.jpg", ts), ("a.jpg", ts), ("m.jpg", ts)])
        records = resolve(doc, "https://example.com/")
        self.assertEqual([r.key for r in records], ["z.jpg", "a.jpg", "m.jpg"])

    def test_offsets_compare_as_instants(self) -> None:
        doc = listing_xml([("utc.jpg", "2024-01-01T10:00:00Z"), ("plus2.jpg", "2024-01-01T11:00:00+02:00")])
        records = resolve(doc, "https://example.com/")
        self.assertEqual([r.key for r in records], ["utc.jpg", "plus2.jpg"])

    def test_non_namespaced_document(self) -> None:
        doc = listing_xml([("a.webp", "2024-01-01T00:00:00Z")], namespaced=False)
        records = resolve(doc, "http://localhost:9000/bucket")
        self.assertEqual(records[0].url, "http://localhost:9000/bucket/a.webp")

    def test_malformed_xml_raises(self) -> None:
        with self.assertRaises(ListingParseError):
            resolve("<ListBucketResult><Contents>", "https://example.com/")
        with self.assertRaises(ListingParseError):
            resolve("", "https://example.com/")

    def test_no_contents_is_empty_not_error(self) -> None:
        self.assertEqual(resolve(listing_xml([]), "https://example.com/"), [])

    def test_pure_and_repeatable(self) -> None:
        doc = listing_xml([("a.jpg", "2024-01-01T00:00:00Z"), ("b.png", None)])
        self.assertEqual(resolve(doc, "https://example.com/x/"), resolve(doc, "https://example.com/x/"))


class TestUrlHelpers(unittest.TestCase):
    def test_base_url_drops_query_fragment_and_trailing_slash(self) -> None:
        self.assertEqual(listing_service.base_url("https://h.example.com/p/q/?a=1#frag"), "https://h.example.com/p/q")
        self.assertEqual(listing_service.base_url("https://h.example.com"), "https://h.example.com")
        self.assertEqual(listing_service.base_url("https://h.example.com///"), "https://h.example.com")

    def test_base_url_keeps_dotted_path_style_bucket(self) -> None:
        self.assertEqual(
            listing_service.base_url("https://s3.amazonaws.com/my.photos/"),
            "https://s3.amazonaws.com/my.photos",
        )

    def test_join_has_exactly_one_slash(self) -> None:
        for base in ("https://h.com/b", "https://h.com/b/"):
            for key in ("k/a.jpg", "/k/a.jpg", "//k/a.jpg"):
                self.assertEqual(listing_service.join_url(base, key), "https://h.com/b/k/a.jpg")

    def test_keys_are_not_reencoded(self) -> None:
        doc = listing_xml([("dir/with space & amp?.jpg".replace("&", "&amp;"), None)])
        records = resolve(doc, "https://h.com/")
        self.assertEqual(records[0].url, "https://h.com/dir/with space & amp?.jpg")

    def test_parse_timestamp(self) -> None:
        self.assertEqual(
            listing_service.parse_timestamp("2024-03-01T12:30:00.000Z"),
            datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc),
        )
        self.assertEqual(
            listing_service.parse_timestamp("2024-03-01T12:30:00"),
            datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc),
        )
        for raw in ("2024-03-01T12:30:00.5Z", "2024-03-01T12:30:00.50000Z", "2024-03-01T12:30:00.500000000Z"):
            self.assertEqual(
                listing_service.parse_timestamp(raw),
                datetime(2024, 3, 1, 12, 30, 0, 500000, tzinfo=timezone.utc),
                raw,
            )
        self.assertIsNone(listing_service.parse_timestamp(""))
        self.assertIsNone(listing_service.parse_timestamp("yesterday"))


if __name__ == "__main__":
    unittest.main()
