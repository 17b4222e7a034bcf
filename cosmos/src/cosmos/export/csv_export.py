import csv
from pathlib import Path
from typing import List, Dict, Any

RESULT_HEADERS = ['published_at', 'title', 'source', 'type', 'url', 'id']

def export_results_csv(data: List[Dict[str, Any]], path: Path):
    """Export search results (snake_case dumps) to CSV."""
    if not data:
        return

    with open(path, 'w', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=RESULT_HEADERS, extrasaction='ignore')
        writer.writeheader()
        writer.writerows(data)
