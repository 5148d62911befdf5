import io
import random
import unittest

from faidx_mcp.bio.accumulator import RecordAccumulator
from faidx_mcp.bio.accumulator import SequenceRecord
from faidx_mcp.bio.scanner import scan_lines
from faidx_mcp.errors import DuplicateSequenceNameError
from faidx_mcp.errors import InconsistentLineLengthError
from faidx_mcp.errors import MissingHeaderError
from faidx_mcp.errors import MissingSequenceNameError


def _accumulate(data: bytes):
    acc = RecordAccumulator()
    for line in scan_lines(io.BytesIO(data), chunk_size=7):
        err = acc.feed(line)
        if err is not None:
            return err
    return acc.finish()


class TestRecordAccumulator(unittest.TestCase):
    def test_two_records(self) -> None:
        data = b">seq1\n" + b"A" * 60 + b"\n" + b"C" * 60 + b"\n" + b"G" * 40 + b"\n>seq2\n" + b"T" * 10 + b"\n"
        self.assertEqual(
            _accumulate(data),
            [
                SequenceRecord(name="seq1", sequence_length=160, byte_offset=6, line_length=60, line_full_length=61),
                SequenceRecord(name="seq2", sequence_length=10, byte_offset=175, line_length=10, line_full_length=11),
            ],
        )

    def test_full_lines_plus_short_final_line(self) -> None:
        for k, L, r in ((1, 5, 1), (3, 10, 9), (10, 60, 17)):
            with self.subTest(k=k, L=L, r=r):
                data = b">s\n" + (b"N" * L + b"\n") * k + b"N" * r + b"\n"
                (rec,) = _accumulate(data)
                self.assertEqual(rec.sequence_length, k * L + r)
                self.assertEqual(rec.line_length, L)
                self.assertEqual(rec.line_full_length, L + 1)

    def test_name_stops_at_whitespace(self) -> None:
        (rec,) = _accumulate(b">chr1 Homo sapiens\tchromosome 1\nACGT\n")
        self.assertEqual(rec.name, "chr1")
        self.assertEqual(rec.byte_offset, 32)

    def test_data_after_short_line_fails(self) -> None:
        for tail in (b"AC\n", b"ACGT\n", b"ACGTACGT\n"):
            with self.subTest(tail=tail):
                err = _accumulate(b">s\nACGT\nAC\n" + tail)
                self.assertIsInstance(err, InconsistentLineLengthError)
                self.assertEqual(err.name, "s")

    def test_data_after_blank_line_fails(self) -> None:
        err = _accumulate(b">s\nACGT\n\nACGT\n")
        self.assertIsInstance(err, InconsistentLineLengthError)

    def test_blank_line_between_records_is_allowed(self) -> None:
        recs = _accumulate(b">a\nACGT\nAC\n\n>b\nGG\n")
        self.assertEqual([r.name for r in recs], ["a", "b"])
        self.assertEqual(recs[0].sequence_length, 6)
        self.assertEqual(recs[1].byte_offset, 15)

    def test_longer_final_line_is_accepted(self) -> None:
        (rec,) = _accumulate(b">s\nACGT\nACGTAC\n")
        self.assertEqual(rec.sequence_length, 10)
        self.assertEqual(rec.line_length, 4)

    def test_duplicate_name(self) -> None:
        err = _accumulate(b">a\nAC\n>b\nAC\n>a\nAC\n")
        self.assertIsInstance(err, DuplicateSequenceNameError)
        self.assertEqual(err.name, "a")

    def test_non_utf8_names_stay_distinct(self) -> None:
        recs = _accumulate(b">chr\xe9\nAC\n>chr\xe8\nAC\n")
        self.assertEqual(len(recs), 2)
        self.assertNotEqual(recs[0].name, recs[1].name)
        self.assertEqual(recs[0].name.encode("utf-8", errors="surrogateescape"), b"chr\xe9")

    def test_names_are_case_sensitive(self) -> None:
        recs = _accumulate(b">a\nAC\n>A\nAC\n")
        self.assertEqual([r.name for r in recs], ["a", "A"])

    def test_data_before_header(self) -> None:
        self.assertIsInstance(_accumulate(b"ACGT\n>a\nAC\n"), MissingHeaderError)

    def test_empty_name(self) -> None:
        self.assertIsInstance(_accumulate(b"> desc\nAC\n"), MissingSequenceNameError)

    def test_record_without_data(self) -> None:
        recs = _accumulate(b">a\n>b\nACG\n")
        self.assertEqual(recs[0], SequenceRecord("a", 0, 3, 0, 0))
        self.assertEqual(recs[1].sequence_length, 3)

    def test_crlf_line_width(self) -> None:
        (rec,) = _accumulate(b">s\r\nACGT\r\nACGT\r\nA\r\n")
        self.assertEqual(rec.byte_offset, 4)
        self.assertEqual(rec.sequence_length, 9)
        self.assertEqual(rec.line_full_length, 6)

    def test_unterminated_final_line(self) -> None:
        (rec,) = _accumulate(b">s\nACGT\nACGT")
        self.assertEqual(rec.sequence_length, 8)

    def test_sequence_length_is_sum_of_stripped_lines(self) -> None:
        rng = random.Random(1234)
        for _ in range(50):
            width = rng.randint(1, 80)
            parts: list[bytes] = []
            expected: dict[str, int] = {}
            for i in range(rng.randint(1, 5)):
                total = rng.randint(0, 400)
                expected[f"s{i}"] = total
                seq = bytes(rng.choice(b"ACGTN") for _ in range(total))
                parts.append(f">s{i} random\n".encode())
                for j in range(0, total, width):
                    parts.append(seq[j : j + width] + b"\n")
            recs = _accumulate(b"".join(parts))
            self.assertEqual({r.name: r.sequence_length for r in recs}, expected)


if __name__ == "__main__":
    unittest.main()
