"""
Unit tests for catalog line parsing.

Catalog contract:
- canonical layout: <id> <instructor...> <weekday> <start>h-<end>h (<room>)
- the weekday/hours may also directly follow the id
- any malformed line raises, nothing is skipped silently
"""

import unittest

from colloscope.errors import CatalogLineError, IdParseError, ParseError
from colloscope.model import ColleTypeId
from colloscope.parse import parse_catalog, parse_catalog_line, parse_colle_id, parse_hour_range
from colloscope.registry import InstructorRegistry

CATALOG = """M4 Dupont Lu 8h-10h (207)
P1 Jean Martin Ma 14h-15h (B12)
A2 Dupont Je 17h-18h (Labo langues)
"""


class TestParseColleId(unittest.TestCase):
    def test_compact_and_explicit_forms(self) -> None:
        cid = parse_colle_id("M4")
        self.assertEqual(cid, ColleTypeId("M", 4))
        self.assertEqual(cid.compact(), "M4")
        self.assertEqual(str(cid), "M4")
        self.assertEqual(cid.explicit(), "Maths 4")
        self.assertEqual(parse_colle_id("P12").explicit(), "Physique 12")
        self.assertEqual(parse_colle_id("A1").explicit(), "Anglais 1")

    def test_unknown_subject_is_an_error(self) -> None:
        with self.assertRaises(IdParseError):
            parse_colle_id("X4")

    def test_malformed_id_is_an_error(self) -> None:
        for token in ("", "M", "4M", "MM4", "M4a"):
            with self.subTest(token=token):
                with self.assertRaises(IdParseError):
                    parse_colle_id(token)


class TestParseHourRange(unittest.TestCase):
    def test_suffixes_are_stripped(self) -> None:
        self.assertEqual(parse_hour_range("8h-10h"), (8, 10))
        self.assertEqual(parse_hour_range("14h-15h"), (14, 15))
        self.assertEqual(parse_hour_range("9-11"), (9, 11))

    def test_invalid_ranges(self) -> None:
        for token in ("8h", "8h-10h-12h", "h-10h", "10h-8h", "8h-8h", "20h-24h"):
            with self.subTest(token=token):
                with self.assertRaises(CatalogLineError):
                    parse_hour_range(token)


class TestParseCatalogLine(unittest.TestCase):
    def test_weekday_and_hours_after_the_id(self) -> None:
        entry = parse_catalog_line("M4 Lu 8h-10h Dupont (207)", InstructorRegistry())

        self.assertEqual(entry.colle_id, ColleTypeId("M", 4))
        self.assertEqual(entry.weekday, 0)
        self.assertEqual((entry.start_hour, entry.end_hour), (8, 10))
        self.assertEqual(entry.room, "207")
        self.assertEqual(entry.instructor.name, "Dupont")

    def test_canonical_layout_with_multi_word_names(self) -> None:
        entry = parse_catalog_line("P1 Jean  Martin Ma 14h-15h (Labo B12)", InstructorRegistry())

        self.assertEqual(entry.colle_id.compact(), "P1")
        self.assertEqual(entry.weekday, 1)
        self.assertEqual((entry.start_hour, entry.end_hour), (14, 15))
        self.assertEqual(entry.room, "Labo B12")
        # tokens are re-joined with single spaces
        self.assertEqual(entry.instructor.name, "Jean Martin")

    def test_same_name_shares_one_instructor(self) -> None:
        registry = InstructorRegistry()
        catalog = parse_catalog(CATALOG, registry)

        m4 = catalog[ColleTypeId("M", 4)]
        a2 = catalog[ColleTypeId("A", 2)]
        self.assertIs(m4.instructor, a2.instructor)
        self.assertEqual(len(registry), 2)
        self.assertIn("Jean Martin", registry)

    def test_registries_do_not_share_instructors(self) -> None:
        first = parse_catalog(CATALOG, InstructorRegistry())
        second = parse_catalog(CATALOG, InstructorRegistry())
        cid = ColleTypeId("M", 4)
        self.assertIsNot(first[cid].instructor, second[cid].instructor)

    def test_parsing_is_deterministic(self) -> None:
        def flat(catalog):
            return [
                (e.colle_id, e.start_hour, e.end_hour, e.weekday, e.room, e.instructor.name)
                for e in catalog.values()
            ]

        self.assertEqual(
            flat(parse_catalog(CATALOG, InstructorRegistry())),
            flat(parse_catalog(CATALOG, InstructorRegistry())),
        )

    def test_unknown_weekday(self) -> None:
        with self.assertRaises(CatalogLineError):
            parse_catalog_line("M4 Dupont Xx 8h-10h (207)", InstructorRegistry())

    def test_missing_room(self) -> None:
        with self.assertRaises(CatalogLineError):
            parse_catalog_line("M4 Dupont Lu 8h-10h 207", InstructorRegistry())

    def test_missing_hour_range(self) -> None:
        with self.assertRaises(CatalogLineError):
            parse_catalog_line("M4 Dupont Lu 8h10h (207)", InstructorRegistry())

    def test_missing_instructor(self) -> None:
        with self.assertRaises(CatalogLineError):
            parse_catalog_line("M4 Lu 8h-10h (207)", InstructorRegistry())

    def test_bad_id_is_reported_as_id_error(self) -> None:
        with self.assertRaises(IdParseError):
            parse_catalog_line("Z4 Dupont Lu 8h-10h (207)", InstructorRegistry())


class TestParseCatalog(unittest.TestCase):
    def test_blank_lines_are_ignored(self) -> None:
        catalog = parse_catalog("\n" + CATALOG + "\n\n", InstructorRegistry())
        self.assertEqual([cid.compact() for cid in catalog], ["M4", "P1", "A2"])

    def test_one_bad_line_aborts_the_table_with_its_line_number(self) -> None:
        text = CATALOG + "P2 Curie Ve 25h-26h (104)\n"
        with self.assertRaises(CatalogLineError) as ctx:
            parse_catalog(text, InstructorRegistry())
        self.assertEqual(ctx.exception.line, 4)
        self.assertIn("line 4", str(ctx.exception))

    def test_duplicate_id_is_rejected(self) -> None:
        text = CATALOG + "M4 Curie Ve 10h-11h (104)\n"
        with self.assertRaises(CatalogLineError) as ctx:
            parse_catalog(text, InstructorRegistry())
        self.assertEqual(ctx.exception.token, "M4")

    def test_all_errors_are_parse_errors(self) -> None:
        with self.assertRaises(ParseError):
            parse_catalog("garbage", InstructorRegistry())


if __name__ == "__main__":
    unittest.main()
