"""
Shared fixtures: a small CSV database with one sequential and one
timestamp-keyed file source.
"""

import json
from pathlib import Path

import pytest

SEQUENTIAL_CSV = """Foo (m/s);Anything (°C);_ignored
2e9;-999;x
-10.34e-3;2;x
4;3;x
5;abc;x
6.99;5;x
7.99;6;x
8.99;7;x
9.99;8;x
10.99;9;x
"""

TIMESTAMP_CSV = """time;Foo (m/s)
2019-12-31 23:59:58;99
2020-01-01 00:00:01;2e9
2020-01-01 00:00:02;-10.34e-3
2020-01-01 00:00:03;4
2020-01-01 00:00:04;5
2020-01-01 00:00:06;6.99
2020-01-01 00:00:07;-999
2020-01-01 00:00:08;8.99
2020-01-01 00:00:09;9.99
2020-01-01 00:00:11;11.99
"""

RENAME_RULES = [
    {"pattern": r"\s*\(.*\)", "replacement": ""},
    {"pattern": "^Foo$", "replacement": "ThisIsTheFooVariable"},
]


def database_config() -> dict:
    return {
        "/A/B/C": {
            "title": "Test catalog",
            "fileSources": {
                "default": {
                    "additionalProperties": {
                        "samplePeriod": "00:00:01",
                        "separator": ";",
                        "invalidValue": "-999",
                        "codePage": 65001,
                        "headerRow": 1,
                        "skipColumnPattern": "^_",
                        "unitPattern": r"\((.*)\)",
                        "defaultGroup": "raw",
                        "replaceNameRules": RENAME_RULES,
                        "catalogSourceFiles": ["DATA/sequential.csv"],
                    }
                },
                "datetime": {
                    "additionalProperties": {
                        "samplePeriod": "00:00:01",
                        "separator": ";",
                        "invalidValue": "-999",
                        "skipColumnPattern": "^time$",
                        "unitPattern": r"\((.*)\)",
                        "defaultGroup": "raw",
                        "replaceNameRules": [
                            {"pattern": r"\s*\(.*\)", "replacement": ""},
                            {"pattern": "^Foo$", "replacement": "FooWithTimestamp"},
                        ],
                        "catalogSourceFiles": ["DATA/timestamped.csv"],
                        "datetimeMode": {
                            "timestampColumn": 1,
                            "timestampPattern": "yyyy-MM-dd HH:mm:ss",
                        },
                    }
                },
                "unconfigured": {},
            },
        },
        "/D/E": {
            "title": "Second catalog",
            "fileSources": {},
        },
    }


@pytest.fixture
def database(tmp_path) -> Path:
    """Directory with config.json and two data files."""
    data_dir = tmp_path / "DATA"
    data_dir.mkdir()
    (data_dir / "sequential.csv").write_text(SEQUENTIAL_CSV, encoding="utf-8")
    (data_dir / "timestamped.csv").write_text(TIMESTAMP_CSV, encoding="utf-8")
    (tmp_path / "config.json").write_text(json.dumps(database_config(), indent=2), encoding="utf-8")
    return tmp_path


@pytest.fixture
def write_csv(tmp_path):
    """Write text to a file below tmp_path and return its path."""

    def _write(name: str, text: str, encoding: str = "utf-8") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding=encoding)
        return path

    return _write
