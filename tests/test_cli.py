import contextlib
import io
import os
import tempfile
import unittest
from pathlib import Path

from faidx_mcp.cli import main


class TestCli(unittest.TestCase):
    def setUp(self) -> None:
        os.environ["FAIDX_MCP_QUIET"] = "1"
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.fasta = self.tmp / "ref.fa"
        self.fasta.write_text(">chr1 x\nACGTA\nCGTAC\nGT\n>chr2\nTT\n", encoding="ascii")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _run(self, argv: list[str]) -> tuple[int, str, str]:
        out, err = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            code = main(argv)
        return code, out.getvalue(), err.getvalue()

    def test_index(self) -> None:
        code, out, _ = self._run(["index", str(self.fasta)])
        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), f"{self.fasta}.fai")
        self.assertEqual(
            Path(f"{self.fasta}.fai").read_text(encoding="utf-8"),
            "chr1\t12\t8\t5\t6\nchr2\t2\t29\t2\t3\n",
        )

    def test_index_failure_exit_status(self) -> None:
        bad = self.tmp / "bad.fa"
        bad.write_text(">a\nAC\n>a\nAC\n", encoding="ascii")
        code, _, err = self._run(["index", str(self.fasta), str(bad)])
        self.assertEqual(code, 1)
        self.assertIn("Duplicate sequence name found for a", err)

    def test_fetch(self) -> None:
        code, out, _ = self._run(["fetch", str(self.fasta), "chr1:4-9", "--width", "4"])
        self.assertEqual(code, 0)
        self.assertEqual(out, ">chr1:4-9\nTACG\nTA\n")

    def test_sequences(self) -> None:
        code, out, _ = self._run(["sequences", str(self.fasta)])
        self.assertEqual(code, 0)
        self.assertEqual(out, "chr1\t12\nchr2\t2\n")

    def test_bad_region(self) -> None:
        code, _, err = self._run(["fetch", str(self.fasta), "chr1:10-20"])
        self.assertEqual(code, 1)
        self.assertIn("exceeds length", err)


if __name__ == "__main__":
    unittest.main()
