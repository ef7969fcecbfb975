"""Tests for testlist parsing and job building."""

from pathlib import Path

import pytest

from regress.models import TestCaseSpec
from regress.utils.jobs import build_job
from regress.utils.testlist import parse_line, parse_testlist, read_testlist, select_tests


EXAMPLE_TESTLIST = """\
// comment
test_alu : 3 : +opt=1
test_ld  : 0 : +opt=2
bad_line_no_colon
"""


class TestParseLine:
    def test_well_formed(self):
        spec = parse_line("riscv_arithmetic_basic_test : 10 : +instr_cnt=10000 +num_of_sub_program=0")
        assert spec == TestCaseSpec(
            name="riscv_arithmetic_basic_test",
            iteration_count=10,
            extra_options="+instr_cnt=10000 +num_of_sub_program=0",
        )

    def test_options_keep_embedded_whitespace(self):
        spec = parse_line("t1:2:+a=1   +b=2\t+c=3")
        assert spec.extra_options == "+a=1   +b=2\t+c=3"

    def test_empty_options(self):
        spec = parse_line("t1 : 2 :")
        assert spec.extra_options == ""

    def test_hyphen_and_digits_in_name(self):
        assert parse_line("rv32-test_2 : 1 : x").name == "rv32-test_2"

    def test_zero_iterations_still_parsed(self):
        spec = parse_line("test_ld : 0 : +opt=2")
        assert spec is not None
        assert spec.iteration_count == 0

    @pytest.mark.parametrize("line", [
        "// commented_test : 1 : +opt",
        "   // indented comment",
        "",
        "   ",
    ])
    def test_comments_and_blank_lines_skipped(self, line):
        assert parse_line(line) is None

    @pytest.mark.parametrize("line", [
        "bad_line_no_colon",
        "Test_Upper : 1 : +opt",
        "test.dot : 1 : +opt",
        "test_a : x : +opt",
        "test_a : 1",
        "test_a 1 : +opt",
        ": 1 : +opt",
    ])
    def test_malformed_lines_skipped_silently(self, line):
        assert parse_line(line) is None


class TestParseTestlist:
    def test_example_testlist(self):
        specs = list(parse_testlist(EXAMPLE_TESTLIST.splitlines()))
        assert [s.name for s in specs] == ["test_alu", "test_ld"]

        buildable = [s for s in specs if s.iteration_count > 0]
        assert buildable == [TestCaseSpec("test_alu", 3, "+opt=1")]

    def test_order_preserved(self):
        lines = ["c : 1 : x", "a : 1 : y", "b : 1 : z"]
        assert [s.name for s in parse_testlist(lines)] == ["c", "a", "b"]

    def test_is_lazy(self):
        def lines():
            yield "first : 1 : a"
            raise AssertionError("read past first entry")

        specs = parse_testlist(lines())
        assert next(specs).name == "first"

    def test_read_testlist(self, tmp_path):
        path = tmp_path / "testlist"
        path.write_text(EXAMPLE_TESTLIST, encoding="utf-8")
        assert [s.name for s in read_testlist(path)] == ["test_alu", "test_ld"]

    def test_read_missing_testlist(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            list(read_testlist(tmp_path / "missing"))


class TestSelectTests:
    SPECS = [
        TestCaseSpec("a", 2, ""),
        TestCaseSpec("b", 0, ""),
        TestCaseSpec("c", 5, ""),
    ]

    def test_all(self):
        assert list(select_tests(self.SPECS)) == self.SPECS

    def test_by_name(self):
        assert [s.name for s in select_tests(self.SPECS, test="c, a")] == ["a", "c"]

    def test_iteration_override_keeps_disabled(self):
        selected = list(select_tests(self.SPECS, iterations=7))
        assert [s.iteration_count for s in selected] == [7, 0, 7]


class TestBuildJob:
    def test_paths(self):
        job = build_job(TestCaseSpec("test_alu", 3, "+opt=1"), Path("out"), seed=42)
        assert job.log_path == Path("out/sim_test_alu.log")
        assert job.artifact_prefix == Path("out/asm_tests/test_alu")
        assert job.seed == 42
        assert job.iteration_count == 3
        assert job.options == "+opt=1"

    def test_seed_from_clock(self):
        job = build_job(TestCaseSpec("t", 1, ""), Path("out"), clock=lambda: 1700000000.9)
        assert job.seed == 1700000000

    def test_seed_sampled_per_job(self):
        ticks = iter([100.0, 101.0])
        clock = lambda: next(ticks)
        spec = TestCaseSpec("t", 1, "")
        assert build_job(spec, Path("out"), clock=clock).seed == 100
        assert build_job(spec, Path("out"), clock=clock).seed == 101

    def test_same_second_shares_seed(self):
        spec = TestCaseSpec("t", 1, "")
        a = build_job(spec, Path("out"), clock=lambda: 5.1)
        b = build_job(spec, Path("out"), clock=lambda: 5.7)
        assert a.seed == b.seed

    def test_parameters(self):
        job = build_job(TestCaseSpec("t", 4, "+x=1 +y=2"), Path("/o"), seed=9)
        assert job.parameters() == {
            "TEST_NAME": "t",
            "ASM_PREFIX": "/o/asm_tests/t",
            "SEED": "9",
            "NUM_OF_TESTS": "4",
            "GEN_OPTS": "+x=1 +y=2",
            "LOG_PATH": "/o/sim_t.log",
        }

    def test_render(self):
        job = build_job(TestCaseSpec("t", 4, "+x=1 +y=2"), Path("/o"), seed=9)
        cmd = job.render("gen +UVM_TESTNAME={test} +num_of_tests={iterations} +seed={seed} {options} -l {log}")
        assert cmd == [
            "gen", "+UVM_TESTNAME=t", "+num_of_tests=4", "+seed=9", "+x=1", "+y=2", "-l", "/o/sim_t.log",
        ]

    def test_render_keeps_paths_with_spaces(self):
        job = build_job(TestCaseSpec("t", 1, "+x=1"), Path("/my out"), seed=9)
        cmd = job.render("gen +asm={prefix} {options} -l {log}")
        assert cmd == ["gen", "+asm=/my out/asm_tests/t", "+x=1", "-l", "/my out/sim_t.log"]

    def test_render_unbalanced_quote(self):
        job = build_job(TestCaseSpec("t", 1, '+x="oops'), Path("/o"), seed=9)
        with pytest.raises(ValueError):
            job.render("gen {options}")
