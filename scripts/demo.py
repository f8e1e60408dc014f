#!/usr/bin/env python3
"""
Demo - Run one sample output per built-in profile through the enforcer.

Usage: python scripts/demo.py

No external services required -- uses an in-memory response cache.
"""

import asyncio
import json

from commitguard.enforcement import (
    CommitmentEnforcer,
    InMemoryResponseCache,
    MemoryAuditSink,
    RuntimeMetadata,
    configure_logging,
)

SAMPLES = [
    {
        "profile": "accountant",
        "input_text": "أحتاج فاتورة لعميل جديد",
        "candidate_output": "تم   إنشاء المسودة.",
        "metadata": RuntimeMetadata(latency_ms=2600, cache_key="invoice-draft"),
    },
    {
        "profile": "secretary",
        "input_text": "نظم لي موعد الاجتماع",
        "candidate_output": "مرحبا، تمام سأرتب الموعد",
        "metadata": RuntimeMetadata(latency_ms=300),
    },
    {
        "profile": "developer",
        "input_text": "Write a python helper that evaluates a formula",
        "candidate_output": "def calc(expr):\n    return eval(expr)",
        "metadata": RuntimeMetadata(latency_ms=900),
    },
]


async def main() -> None:
    cache = InMemoryResponseCache({"invoice-draft": "فاتورة ضريبية جاهزة تتضمن ضريبة القيمة المضافة."})
    audit = MemoryAuditSink()
    enforcer = CommitmentEnforcer(cache=cache, audit_sink=audit)

    for sample in SAMPLES:
        report = await enforcer.evaluate(**sample)
        print(f"\n=== {sample['profile']} ===")
        print(json.dumps(report.to_flat_dict(), ensure_ascii=False, indent=2))

    print("\n=== stats ===")
    print(json.dumps(enforcer.get_stats(), indent=2))
    print(f"audit events: {len(audit.events)}")


if __name__ == "__main__":
    configure_logging("WARNING")
    asyncio.run(main())
