"""Script to upload a valve job spreadsheet to a running API"""
import sys
import requests
from pathlib import Path

API_BASE_URL = "http://localhost:8000/api"


def import_file(file_path: str):
    """Upload an Excel/CSV file and print the import summary"""
    print(f"\nImporting {file_path}...")

    path = Path(file_path)
    with open(path, 'rb') as f:
        response = requests.post(f"{API_BASE_URL}/import", files={"file": (path.name, f)})

    if response.status_code == 200:
        result = response.json()
        print(f"✓ Import complete: {result['added']} added, {result['updated']} updated")
        for warning in result.get("warnings", []):
            print(f"  ! {warning}")
        return result
    else:
        print(f"✗ Error: {response.status_code}")
        print(response.text)
        return None


def print_stats():
    response = requests.get(f"{API_BASE_URL}/jobs/stats")
    if response.status_code != 200:
        return

    stats = response.json()
    print(f"\nTotal jobs: {stats['total']} (average progress {stats['average_progress']}%)")
    for status, count in stats["by_status"].items():
        print(f"   {status}: {count}")


def main():
    if len(sys.argv) < 2:
        print("Usage: python scripts/import_spreadsheet.py <file.xlsx> [more files...]")
        sys.exit(1)

    print("=" * 60)
    print("VALVE REPAIR JOBS - SPREADSHEET IMPORT")
    print("=" * 60)

    for file_path in sys.argv[1:]:
        import_file(file_path)

    print_stats()


if __name__ == "__main__":
    main()
