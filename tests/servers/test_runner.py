import os
import sys
import pytest

# Get the absolute path to the project root
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))

# Add project root to Python path
if project_root not in sys.path:
    sys.path.insert(0, project_root)

if __name__ == "__main__":
    # Live tool tests need MAJESTIC_API_KEY and ANTHROPIC_API_KEY (env or .env)
    tests_path = os.path.join(os.path.dirname(__file__), "majestic", "tests.py")
    if not os.path.exists(tests_path):
        print(f"Error: No tests.py found at {tests_path}")
        sys.exit(1)

    pytest_args = [
        "-v",  # verbose output
        "--capture=no",  # show print statements
        "-p",
        "no:warnings",  # disable warning capture
        "--import-mode=importlib",  # Use importlib for imports
        tests_path,
    ]

    # Pass through --remote / --endpoint and any other pytest flags
    pytest_args.extend(sys.argv[1:])

    sys.exit(pytest.main(pytest_args))
