# scp_guard/demo/sample_report.py

import json
from pathlib import Path
from typing import Any, Dict, List, Union

SAMPLE_REPORT: List[Dict[str, Any]] = [
    {
        "account": {
            "identifier": "999888777666",
            "name": "some account"
        },
        "description": "AWS s3 service usage scan",
        "partition": {
            "year": "2021",
            "month": "03"
        },
        "results": {
            "event_source": "s3.amazonaws.com",
            "service_usage": [
                {"event_name": "ListObjectVersions", "count": 15},
                {"event_name": "ListObjects", "count": 224},
                {"event_name": "GetBucketEncryption", "count": 11},
                {"event_name": "CreateMultipartUpload", "count": 6},
                {"event_name": "GetObject", "count": 205},
                {"event_name": "GetBucketLifecycle", "count": 1},
                {"event_name": "ListBuckets", "count": 125},
                {"event_name": "GetBucketPolicy", "count": 19},
                {"event_name": "GetBucketVersioning", "count": 52},
                {"event_name": "PutObject", "count": 31}
            ]
        }
    }
]


def sample_report_bytes() -> bytes:
    return json.dumps(SAMPLE_REPORT, indent=2).encode("utf-8")


def write_sample_report(path: Union[str, Path]) -> Path:
    target = Path(path)
    target.write_bytes(sample_report_bytes())
    return target
