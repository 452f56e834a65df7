# scripts/local_check.py
import subprocess
import sys
import tomllib

STEPS: list[tuple[str, str, bool]] = [
    ("toml-sort pyproject.toml --in-place --all", "Sorting TOML", True),
    ("python -m black src scripts tests", "Black formatting", True),
    ("ruff check src scripts tests", "Ruff lint", False),
    ("mypy src/alchemist", "Mypy type check", False),
    ("python -m pytest -q", "Test suite", False),
]


def run(cmd: str, desc: str, fix: bool = False) -> bool:
    print(f"\n{'🔧' if fix else '🧪'} {desc} ...")
    try:
        subprocess.run(cmd, check=True, shell=True)
    except subprocess.CalledProcessError as e:
        print(f"⚠️  {desc} failed ({e.returncode})")
        return False
    return True


def check_toml() -> None:
    try:
        with open("pyproject.toml", "rb") as f:
            tomllib.load(f)
        print("✅ TOML syntax OK")
    except (OSError, tomllib.TOMLDecodeError) as e:
        print(f"❌ TOML error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    check_toml()
    failed = [desc for cmd, desc, fix in STEPS if not run(cmd, desc, fix)]
    print(f"\n🏁 Local check completed{': failed ' + ', '.join(failed) if failed else ''}.")
    sys.exit(1 if failed else 0)
