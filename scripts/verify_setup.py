#!/usr/bin/env python3
"""
Setup Verification Script for the Bid Validator.

Checks the deployment is ready before wiring the validator into a bidder:
1. Dependencies installed
2. Modules import
3. Metadata tables load
4. A known-good bid survives validation

Run with: python scripts/verify_setup.py
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


def print_header(text: str):
    print(f"\n{'='*60}")
    print(f"  {text}")
    print(f"{'='*60}")


def print_check(name: str, passed: bool, detail: str = ""):
    status = "OK" if passed else "FAIL"
    color_start = "\033[92m" if passed else "\033[91m"
    color_end = "\033[0m"
    print(f"  {color_start}[{status}]{color_end} {name}")
    if detail:
        print(f"      {detail}")


def check_python_version() -> bool:
    """Check Python version >= 3.10."""
    version = sys.version_info
    passed = version.major == 3 and version.minor >= 10
    print_check(
        "Python Version",
        passed,
        f"Found {version.major}.{version.minor}.{version.micro}, need 3.10+",
    )
    return passed


def check_dependencies() -> bool:
    """Check required Python packages are installed."""
    required_packages = [
        ("pydantic", "pydantic"),
        ("pydantic_settings", "pydantic-settings"),
        ("structlog", "structlog"),
        ("prometheus_client", "prometheus-client"),
    ]

    missing = []
    for import_name, package_name in required_packages:
        try:
            __import__(import_name)
        except ImportError:
            missing.append(package_name)

    passed = len(missing) == 0
    if missing:
        print_check(
            "Python Dependencies",
            False,
            f"Missing: {', '.join(missing)}\nRun: pip install -e .",
        )
    else:
        print_check("Python Dependencies", True, "All packages installed")

    return passed


def check_import_structure() -> bool:
    """Check all modules can be imported."""
    modules = [
        "bid_validator.core.config",
        "bid_validator.core.metadata",
        "bid_validator.core.rules",
        "bid_validator.core.validator",
        "bid_validator.models.bidding",
        "bid_validator.services.metrics",
        "bid_validator.cli",
    ]

    failed = []
    for module in modules:
        try:
            __import__(module)
        except Exception as e:
            failed.append((module, str(e)[:50]))

    passed = len(failed) == 0
    if failed:
        print_check(
            "Module Imports",
            False,
            f"Failed: {failed[0][0]} - {failed[0][1]}",
        )
        for mod, err in failed[1:]:
            print(f"      {mod}: {err}")
    else:
        print_check("Module Imports", True, f"All {len(modules)} modules import OK")

    return passed


def check_metadata() -> bool:
    """Check the configured metadata file loads."""
    try:
        from bid_validator.core.config import get_settings
        from bid_validator.core.metadata import Metadata

        metadata = Metadata.load(get_settings().metadata_path)
        print_check(
            "Metadata Tables",
            True,
            f"{len(metadata.vendors)} vendors, "
            f"{len(metadata.sensitive_categories)} sensitive categories",
        )
        return True

    except Exception as e:
        print_check("Metadata Tables", False, str(e)[:80])
        return False


def check_validation_roundtrip() -> bool:
    """Run one compliant bid through the validator."""
    try:
        from prometheus_client import CollectorRegistry

        from bid_validator.core.metadata import Metadata
        from bid_validator.core.validator import BidValidator
        from bid_validator.models.bidding import Ad, AdSlot, AdSlotBid, BidRequest, BidResponse
        from bid_validator.services.metrics import ValidatorMetrics

        validator = BidValidator(
            Metadata.load(),
            reporter=ValidatorMetrics(registry=CollectorRegistry()),
        )
        request = BidRequest(id="verify", adslots=[AdSlot(id=1, widths=[300], heights=[250])])
        response = BidResponse(ads=[Ad(adslots=[AdSlotBid(id=1, max_cpm_micros=1_000_000)])])
        validator.validate(request, response)

        passed = response.bid_count == 1
        print_check(
            "Validation",
            passed,
            "Compliant bid kept" if passed else "Compliant bid was removed",
        )
        return passed

    except Exception as e:
        print_check("Validation", False, str(e)[:80])
        return False


def run_verification():
    """Run all verification checks."""
    print_header("BID VALIDATOR SETUP VERIFICATION")

    results = {}

    print("\n[1/3] BASIC REQUIREMENTS")
    print("-" * 40)
    results["python"] = check_python_version()
    results["dependencies"] = check_dependencies()

    print("\n[2/3] CODE STRUCTURE")
    print("-" * 40)
    results["imports"] = check_import_structure()

    print("\n[3/3] METADATA AND VALIDATION")
    print("-" * 40)
    if not results["dependencies"]:
        print_check("Skipped", False, "Fix dependencies first")
        results["metadata"] = False
        results["validation"] = False
    else:
        results["metadata"] = check_metadata()
        results["validation"] = check_validation_roundtrip()

    print_header("VERIFICATION SUMMARY")

    total = len(results)
    passed = sum(1 for v in results.values() if v)

    print(f"\n  Checks Passed: {passed}/{total}")

    if passed == total:
        print("\n  \033[92m[OK] ALL CHECKS PASSED\033[0m")
        print("\n  Next steps:")
        print("    bid-validator validate request.json response.json")
    else:
        print("\n  \033[91m[FAIL] SOME CHECKS FAILED - Fix issues above\033[0m")

        if not results.get("dependencies"):
            print("\n  To fix dependencies:")
            print("    pip install -e .")

        if not results.get("metadata"):
            print("\n  To fix metadata:")
            print("    unset BID_VALIDATOR_METADATA_PATH or point it at a valid JSON file")

    print()
    return passed == total


def main():
    """Main entry point."""
    try:
        success = run_verification()
        sys.exit(0 if success else 1)
    except KeyboardInterrupt:
        print("\n\nVerification cancelled.")
        sys.exit(1)


if __name__ == "__main__":
    main()
