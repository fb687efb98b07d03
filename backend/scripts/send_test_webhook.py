"""
Script to post a sample status payload to a running instance.
"""
import json
import os
import sys

import httpx

BASE_URL = os.getenv("WEBHOOK_BASE_URL", "http://localhost:8000")
CLIENT_ID = os.getenv("CARRIER_CLIENT_ID", "stagingID")
LICENSE_KEY = os.getenv("CARRIER_LICENSE_KEY", "your-test-token")

SAMPLE_PAYLOAD = {
    "statustracking": [
        {
            "Shipment": {
                "SenderID": "BDART",
                "ReceiverID": "ACME",
                "WaybillNo": "50012345678",
                "RefNo": "ORD-1001",
                "Prodcode": "A",
                "Origin": "MUMBAI",
                "OriginAreaCode": "BOM",
                "Destination": "DELHI",
                "DestinationAreaCode": "DEL",
                "PickUpDate": "17-11-2025",
                "PickUpTime": "1030",
                "ExpectedDeliveryDate": "20-11-2025",
                "Weight": "1.50",
                "Scans": {
                    "ScanDetail": [
                        {
                            "ScanType": "UD",
                            "ScanCode": "015",
                            "Scan": "SHIPMENT DELIVERED",
                            "ScanDate": "19-11-2025",
                            "ScanTime": "1445",
                            "ScannedLocationCode": "DEL",
                            "ScannedLocation": "DELHI HUB",
                        }
                    ],
                    "DeliveryDetails": {
                        "ReceivedBy": "R SHARMA",
                        "Relation": "SELF",
                    },
                    "CallLogs": {"Message": "Customer reached", "LogDate": "20251118", "LogTime": "1010"},
                },
            }
        }
    ]
}


def send_test_webhook(payload=None):
    url = f"{BASE_URL}/api/carrier/status"
    headers = {"client-id": CLIENT_ID, "license-key": LICENSE_KEY}
    print(f"Posting to {url} as {CLIENT_ID}")
    try:
        response = httpx.post(url, json=payload or SAMPLE_PAYLOAD, headers=headers, timeout=35)
    except httpx.HTTPError as e:
        print(f"Request failed: {e}")
        print("Make sure the server is running")
        return 1

    print(f"Status: {response.status_code}")
    print(json.dumps(response.json(), indent=2))
    return 0 if response.status_code == 200 else 1


if __name__ == "__main__":
    payload = None
    if len(sys.argv) > 1:
        with open(sys.argv[1], "r", encoding="utf-8") as fh:
            payload = json.load(fh)
    sys.exit(send_test_webhook(payload))
