import unittest

from csv_clip.tracker import Section, SectionRules, SectionTracker, normalize_label, split_value


def run_tracker(records, rules=None):
    tracker = SectionTracker(rules or SectionRules(enabled=True))
    return tracker, [tracker.apply(record) for record in records]


class SplitValueTests(unittest.TestCase):
    def test_separator_stays_on_the_left_piece(self):
        self.assertEqual(split_value("01_zzzz"), ("01_", "zzzz"))

    def test_only_the_first_separator_splits(self):
        self.assertEqual(split_value("A_B_C"), ("A_", "B_C"))

    def test_missing_separator_gives_empty_second_piece(self):
        self.assertEqual(split_value("0123"), ("0123", ""))
        self.assertEqual(split_value(""), ("", ""))

    def test_separator_at_the_edges(self):
        self.assertEqual(split_value("_x"), ("_", "x"))
        self.assertEqual(split_value("x_"), ("x_", ""))

    def test_custom_separator(self):
        self.assertEqual(split_value("12-34", "-"), ("12-", "34"))


class NormalizeLabelTests(unittest.TestCase):
    def test_trims_casefolds_and_drops_quotes(self):
        self.assertEqual(normalize_label("  Detail "), "detail")
        self.assertEqual(normalize_label('"CODE"'), "code")
        self.assertEqual(normalize_label('"'), '"')


class SectionTrackerTests(unittest.TestCase):
    def test_detail_section_splits_the_code_column(self):
        tracker, output = run_tracker(
            [
                ["header"],
                ["shop", "date"],
                ["Tokyo 01", "2024-04-01"],
                ["detail"],
                ["line", "code", "qty"],
                ["1", "01_zzzz", "3"],
                ["2", "0456", "10"],
                ["3", "A_B_C"],
                ["4"],
                ["header"],
                ["Osaka 02", "2024-04-02"],
            ]
        )
        self.assertEqual(
            output,
            [
                ["header"],
                ["shop", "date"],
                ["Tokyo 01", "2024-04-01"],
                ["detail"],
                ["line", "code_prefix", "code_body", "qty"],
                ["1", "01_", "zzzz", "3"],
                ["2", "0456", "", "10"],
                ["3", "A_", "B_C"],
                ["4"],
                ["header"],
                ["Osaka 02", "2024-04-02"],
            ],
        )
        self.assertIs(tracker.section, Section.HEADER)
        self.assertIsNone(tracker.split_index)
        self.assertEqual(tracker.rows_split, 3)

    def test_consecutive_detail_blocks_relocate_the_split_column(self):
        tracker, output = run_tracker(
            [
                ["detail"],
                ["code", "no"],
                ["A_1", "1"],
                ["detail"],
                ["no", "code"],
                ["2", "B_2"],
            ]
        )
        self.assertEqual(
            output,
            [
                ["detail"],
                ["code_prefix", "code_body", "no"],
                ["A_", "1", "1"],
                ["detail"],
                ["no", "code_prefix", "code_body"],
                ["2", "B_", "2"],
            ],
        )
        self.assertEqual(tracker.split_index, 1)
        self.assertEqual(tracker.rows_split, 2)

    def test_every_marker_resets_the_split_target(self):
        tracker = SectionTracker(SectionRules(enabled=True))
        tracker.apply(["detail"])
        tracker.apply(["id", "code"])
        self.assertEqual(tracker.split_index, 1)
        self.assertEqual(tracker.apply(["detail", "x_y"]), ["detail", "x_y"])
        self.assertIsNone(tracker.split_index)
        self.assertIs(tracker.section, Section.DETAIL)

    def test_marker_row_can_carry_the_column_names(self):
        _, output = run_tracker([["detail", "no", "code"], ["x", "1", "A_1"]])
        self.assertEqual(output, [["detail", "no", "code_prefix", "code_body"], ["x", "1", "A_", "1"]])

    def test_records_before_split_column_pass_through(self):
        _, output = run_tracker(
            [
                ["detail"],
                ["memo"],
                ["x_y"],
                ["code"],
                ["x_y"],
            ]
        )
        self.assertEqual(output, [["detail"], ["memo"], ["x_y"], ["code_prefix", "code_body"], ["x_", "y"]])

    def test_code_column_outside_detail_section_is_untouched(self):
        _, output = run_tracker(
            [
                ["header"],
                ["id", "code"],
                ["1", "01_zzzz"],
            ]
        )
        self.assertEqual(output, [["header"], ["id", "code"], ["1", "01_zzzz"]])

    def test_section_change_resets_split_target(self):
        tracker, output = run_tracker(
            [
                ["detail"],
                ["code"],
                ["header"],
                ["x_y"],
                ["detail"],
                ["a", "code"],
                ["b", "1_2"],
            ]
        )
        self.assertEqual(output[3], ["x_y"])
        self.assertEqual(output[5], ["a", "code_prefix", "code_body"])
        self.assertEqual(output[6], ["b", "1_", "2"])
        self.assertEqual(tracker.split_index, 1)

    def test_markers_and_column_names_are_case_insensitive(self):
        _, output = run_tracker([[" DETAIL "], ["id", " Code "], ["1", "9_Z"], ['"Detail"'], ['"CODE"'], ["8_Y"]])
        self.assertEqual(
            output,
            [[" DETAIL "], ["id", "code_prefix", "code_body"], ["1", "9_", "Z"], ['"Detail"'], ["code_prefix", "code_body"], ["8_", "Y"]],
        )

    def test_apply_does_not_mutate_input(self):
        tracker = SectionTracker(SectionRules(enabled=True))
        header = ["code"]
        row = ["1_2"]
        tracker.apply(["detail"])
        self.assertEqual(tracker.apply(header), ["code_prefix", "code_body"])
        self.assertEqual(tracker.apply(row), ["1_", "2"])
        self.assertEqual(header, ["code"])
        self.assertEqual(row, ["1_2"])

    def test_custom_rules(self):
        rules = SectionRules(
            enabled=True,
            markers={"H": "header", "D": "detail"},
            split_column="item",
            split_names=["item_group", "item_no"],
            separator="-",
        )
        _, output = run_tracker([["D"], ["item"], ["AB-001"], ["detail"], ["H"], ["C-2"]], rules)
        self.assertEqual(output, [["D"], ["item_group", "item_no"], ["AB-", "001"], ["detail", ""], ["H"], ["C-2"]])

    def test_empty_record_passes_through(self):
        _, output = run_tracker([[]])
        self.assertEqual(output, [[]])


class SectionRulesTests(unittest.TestCase):
    def test_rejects_multi_character_separator(self):
        with self.assertRaisesRegex(ValueError, "single character"):
            SectionRules(separator="__")

    def test_rejects_wrong_number_of_split_names(self):
        with self.assertRaisesRegex(ValueError, "exactly two"):
            SectionRules(split_names=("a", "b", "c"))

    def test_rejects_unknown_section_name(self):
        with self.assertRaises(ValueError):
            SectionRules(markers={"x": "footer"})


if __name__ == "__main__":
    unittest.main()
