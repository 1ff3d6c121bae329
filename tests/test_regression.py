import json
from pathlib import Path
import pytest

from golfbets.config import EngineSettings
from golfbets.pipeline import settle_round_payload

BASE_DIR = Path(__file__).resolve().parent
REGRESSION_DIR = BASE_DIR / "regression"
CASES_FILE = REGRESSION_DIR / "cases.json"
SETTINGS = EngineSettings(money_precision=2, zero_sum_tolerance=1e-6, strict=False, log_level="INFO")


def load_cases():
    if not CASES_FILE.exists():
        return []
    return json.loads(CASES_FILE.read_text(encoding="utf-8"))


@pytest.mark.parametrize("case", load_cases(), ids=lambda case: case["payload"])
def test_regression_cases(case):
    payload_path = REGRESSION_DIR / case["payload"]
    expected_path = REGRESSION_DIR / case["expected"]

    if not payload_path.exists() or not expected_path.exists():
        pytest.skip("Regression assets not present")

    expected = json.loads(expected_path.read_text(encoding="utf-8"))
    payload = json.loads(payload_path.read_text(encoding="utf-8"))

    result = settle_round_payload(payload, settings=SETTINGS)

    assert sum(result["totals"].values()) == pytest.approx(0)

    for key, expected_value in expected.items():
        if key == "games":
            assert sorted(result["games"]) == sorted(expected_value)
        elif key == "states":
            for game, fields in expected_value.items():
                for path, value in fields.items():
                    node = result["games"][game]
                    for part in path.split("."):
                        node = node[int(part)] if isinstance(node, list) else node[part]
                    assert node == value, f"{game}.{path}"
        else:
            assert result[key] == expected_value
