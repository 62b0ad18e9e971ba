from interview_prep.core.logging import setup_logging
from interview_prep.workers.tasks import sweep_expired_preps_sync


def main() -> None:
    setup_logging()
    result = sweep_expired_preps_sync()
    print(f"Removed {result['deleted']} expired interview preparations")


if __name__ == "__main__":
    main()
