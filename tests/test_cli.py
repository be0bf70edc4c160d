"""End-to-end tests of the command line through main()."""
import io
import json
import shutil
import tempfile
from pathlib import Path

import pytest

from zaremba.cli import main
from zaremba.schemas import RecordSetterLine
from zaremba.user_output import UserOutput, sparkline


@pytest.fixture
def work_dir():
    tmpdir = tempfile.mkdtemp(prefix="zaremba_cli_test_")
    yield Path(tmpdir)
    shutil.rmtree(tmpdir, ignore_errors=True)


def run(capsys, *argv):
    code = main(['--no-log-file', *argv])
    captured = capsys.readouterr()
    return code, captured.out.splitlines(), captured.err


class TestUserOutput:
    def test_sparkline(self):
        assert sparkline([2, 0, 1]) == '▂ ▁'
        assert sparkline([8]) is None

    def test_quiet_keeps_results(self):
        out = io.StringIO()
        output = UserOutput(stdout=out, quiet=True)
        output.info("chatter")
        output.result("42")
        assert out.getvalue() == "42\n"

    def test_latex_table(self):
        out = io.StringIO()
        line = RecordSetterLine(n="4", z=0.5, tau=3, v=0.25, record_type="both", step="2", step_from_v="2")
        UserOutput(stdout=out).latex_table([line])
        assert out.getvalue().splitlines() == [
            "n & z(n) & tau(n) & v(n) & type of record & z step & v step",
            "4 & 0.5 & 3 & 0.25 & both & 2 & 2",
        ]


class TestCommands:
    def test_waterfall(self, capsys):
        code, lines, _ = run(capsys, 'waterfall', '40')
        assert code == 0
        assert lines[:4] == ['1: []', '2: [1]', '4: [2]', '6: [0, 1]']
        assert lines[-1] == '36: [0, 2]'
        assert len(lines) == 11

    def test_waterfall_batched_matches(self, capsys):
        _, single, _ = run(capsys, 'waterfall', '5000')
        _, batched, _ = run(capsys, 'waterfall', '5000', '--step', '7')
        assert batched == single

    def test_single(self, capsys):
        code, lines, _ = run(capsys, 'single', '6')
        assert code == 0
        z_part, tau_part, v_part = lines[0].split("\t")
        assert float(z_part.split(" = ")[1]) == pytest.approx(1.0114042647073518, rel=1e-13)
        assert tau_part == "tau(n) = 4"
        assert float(v_part.split(" = ")[1]) == pytest.approx(0.7295739585136225, rel=1e-13)

    def test_single_not_waterfall(self, capsys):
        code, lines, err = run(capsys, 'single', '10')
        assert code == 1
        assert "Not a waterfall number" in err

    def test_factor(self, capsys):
        code, lines, _ = run(capsys, 'factor', '5400')
        assert code == 0
        assert lines == [
            "Prime exponents: [3, 3, 2]",
            "Repeated prime factors: 2^3 * 3^3 * 5^2",
            "Primorial exponents: [0, 1, 2]",
            "Primorial factors: 6^1 * 30^2",
            "Primorial sparkline: [ ▁▂]",
        ]

    def test_records_enumerate(self, capsys):
        code, lines, _ = run(capsys, 'records', '--enumerate', '--max-n', '10')
        assert code == 0
        parsed = [json.loads(line) for line in lines]
        assert [(r['n'], r['type']) for r in parsed] == [('4', 'both'), ('6', 'both')]

    def test_records_invalid_args(self, capsys):
        code, _, err = run(capsys, 'records', '--enumerate')
        assert code == 2
        assert "--max-n" in err

    def test_records_checkpoint_and_resume(self, capsys, work_dir):
        checkpoint = work_dir / "checkpoint.json"
        records_file = work_dir / "records.jsonl"

        code, full, _ = run(capsys, 'records', '--max-n', '100000')
        assert code == 0

        code, first, _ = run(capsys, 'records', '--max-n', '1000',
                             '--checkpoint', str(checkpoint), '--output', str(records_file))
        assert code == 0
        saved = json.loads(checkpoint.read_text())
        assert saved['n'] == json.loads(first[-1])['n']
        assert len(records_file.read_text().splitlines()) == len(first)

        code, rest, _ = run(capsys, 'records', '--max-n', '100000', '--resume', str(checkpoint))
        assert code == 0
        assert first + rest == full

    def test_resume_from_checkpoint_without_v_record(self, capsys, work_dir):
        checkpoint = work_dir / "checkpoint.json"
        code, full, _ = run(capsys, 'records', '--max-n', '100000')
        assert code == 0

        code, first, _ = run(capsys, 'records', '--max-n', '400', '--checkpoint', str(checkpoint))
        assert code == 0
        saved = json.loads(checkpoint.read_text())
        del saved['record_v']
        checkpoint.write_text(json.dumps(saved))

        code, rest, _ = run(capsys, 'records', '--max-n', '100000', '--resume', str(checkpoint))
        assert code == 0
        assert first + rest == full

    def test_resume_missing_checkpoint(self, capsys, work_dir):
        code, _, err = run(capsys, 'records', '--resume', str(work_dir / "none.json"))
        assert code == 1
        assert "checkpoint" in err

    def test_latex_from_records(self, capsys, work_dir):
        records_file = work_dir / "records.jsonl"
        run(capsys, 'records', '--max-n', '50', '--output', str(records_file))
        code, lines, _ = run(capsys, 'latex', str(records_file))
        assert code == 0
        assert lines[0].startswith("n & z(n)")
        assert lines[1].startswith("4 & 0.6931471805599453 & 3 & ")
        assert " & both & " in lines[1]

    def test_latex_missing_file(self, capsys, work_dir):
        code, _, err = run(capsys, 'latex', str(work_dir / "missing.jsonl"))
        assert code == 1

    def test_k_primes(self, capsys):
        code, lines, _ = run(capsys, 'k-primes', '--k', '2', '--V', '0.8')
        assert code == 0
        assert lines[0].startswith("Max z(n) = ")
        assert any(line.startswith("Checked ") for line in lines)

    def test_k_primes_quiet(self, capsys):
        code, lines, _ = run(capsys, '--quiet', 'k-primes', '--k', '2', '--V', '0.8')
        assert code == 0
        assert not any(line.startswith(("Max ", "Checked ")) for line in lines)

    def test_bad_config(self, capsys, work_dir):
        code, _, err = run(capsys, '--config', str(work_dir / "missing.yaml"), 'single', '6')
        assert code == 2
        assert "configuration" in err
