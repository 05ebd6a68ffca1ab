"""
core/sample_data.py - Default DataContext used when a preview has no data.
"""

from __future__ import annotations

import copy
from typing import Any, Dict

_SAMPLE: Dict[str, Any] = {
    "shop_name": "Tohands Store",
    "shop_address": "123 Main Street, Bangalore, Karnataka 560001",
    "gstin": "29ABCDE1234F1Z5",
    "phone_number": "+9876543210",
    "customer_name": "John Doe",
    "customer_mobile": "+91-9876543210",
    "qr_data": "upi://pay?pa=merchant@upi&pn=Tohands%20Store&am=1040.00&cu=INR",
    "bill_date": "2025-01-15T14:30:00Z",
    "bill_number": "BILL-2025-001",
    "transaction_type": "Sale",
    "payment_type": "UPI",
    "cashier": "Cashier-001",
    "items": [
        {"slNo": 1, "name": "Product A", "qty": 2, "rate": 100.00, "amount": 200.00, "sku": "SKU-001"},
        {"slNo": 2, "name": "Product B", "qty": 3, "rate": 150.00, "amount": 450.00, "sku": "SKU-002"},
    ],
    "subtotal": 1000.00,
    "discount": 50.00,
    "tax": {
        "cgst": {"rate": 9, "amount": 45.00},
        "sgst": {"rate": 9, "amount": 45.00},
        "igst": {"rate": 0, "amount": 0.00},
    },
    "total": 1040.00,
    "calculation_steps": [
        {"operator": "x", "operand": "100.00"},
        {"operator": "x", "operand": "2.00"},
        {"operator": "+", "operand": "150.00"},
        {"operator": "x", "operand": "3.00"},
        {"operator": "-", "operand": "50.00"},
        {"operator": "=", "operand": "₹1,040.00", "isFinal": True},
    ],
}


def default_sample_data() -> Dict[str, Any]:
    """A fresh copy of the built-in sample receipt data."""
    return copy.deepcopy(_SAMPLE)
