"""Main script for running the fact aggregator interactively."""

import asyncio

from .infrastructure.dependencies import ServiceContainer
from .infrastructure.logging import configure_logging


async def main():
    """Run the fact aggregator."""
    print("Fact Aggregator - claim verification across Google, Factiverse and BigKinds")
    print("-------------------------------------------------------------------------")

    container = ServiceContainer()
    configure_logging(container.settings.log_level)
    await container.startup()
    service = container.get_fact_checking_service()

    try:
        while True:
            statement = input("\nEnter a claim to verify (or 'quit' to exit): ")
            if statement.lower() in ("quit", "exit", "q"):
                break
            if not statement.strip():
                continue

            print("\nVerifying...")
            record = await service.verify_claim(statement)
            verification = record.verification

            print("\nResults:")
            print(f"Status: {verification.status.value}")
            print(f"Trust score: {verification.trust_score:.0%}")
            print(f"Processing time: {record.processing_time}{' (cached)' if record.from_cache else ''}")
            print(f"\nExplanation: {verification.explanation}")

            if verification.sources:
                print("\nSources:")
                for i, source in enumerate(verification.sources, 1):
                    print(f"{i}. {source.name} - {source.url}")

    finally:
        await container.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
