#!/usr/bin/env python3
import sys


def main() -> int:
    print("Running preflight check...")
    try:
        import dealsim.main  # noqa: F401
        print("Import dealsim.main: OK")

        from dealsim.core import actions as A
        from dealsim.core.reducer import replay

        # Platform observer walks the whole pipeline under a non-gated tier
        s = replay([
            A.Ack(ack="READ_REQUIRED_DISCLOSURES"),
            A.RequestAdvance(),
            A.RequestAdvance(),
            A.Ack(ack="ACCEPTED_CONFIDENTIALITY_TERMS"),
            A.RequestAdvance(),
            A.RequestAdvance(),
            A.RequestAdvance(),
            A.RequestAdvance(),
        ])
        if s.stage != "SETTLEMENT":
            print(f"Preflight check FAILED: replay ended at {s.stage}")
            return 1
        print(f"Replay to SETTLEMENT: OK ({len(s.events)} events)")

        print("Preflight check passed.")
        return 0
    except Exception as e:
        print(f"Preflight check FAILED: {e}")
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
