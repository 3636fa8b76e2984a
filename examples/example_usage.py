"""Example: drive the engine through the service layer (no Flask).

Uses the in-process store so it runs without a database.
"""

from datetime import datetime

from src.tardiness_system.tardiness_system.core.enums import DisciplinaryActionType, TardinessType, TriggerType
from src.tardiness_system.tardiness_system.discipline.model import DisciplinaryActionRule
from src.tardiness_system.tardiness_system.main import configure_logging
from src.tardiness_system.tardiness_system.processing.service import TardinessProcessingService
from src.tardiness_system.tardiness_system.store.memory_store import InMemoryTardinessStore
from src.tardiness_system.tardiness_system.tardiness.model import TardinessRule


def main():
    configure_logging("INFO")
    store = InMemoryTardinessStore(
        tardiness_rules=[
            TardinessRule("tr_late", "Late arrivals", TardinessType.LATE_ARRIVAL, 1, 15, 4, 1),
            TardinessRule("tr_direct", "Direct tardiness", TardinessType.DIRECT_TARDINESS, 16, None, 1, 1),
        ],
        escalation_rules=[
            DisciplinaryActionRule(
                "dar_formal_tardies_3",
                "Written warning for 3 formal tardies",
                TriggerType.FORMAL_TARDIES,
                3,
                DisciplinaryActionType.WRITTEN_WARNING,
                period_days=30,
                requires_approval=False,
            ),
        ],
    )
    service = TardinessProcessingService(store)

    for day in range(2, 5):
        scheduled = datetime(2026, 3, day, 8, 30)
        result = service.process_tardiness(1, datetime(2026, 3, day, 9, 5), scheduled, attendance_id=day)
        print(result.as_dict())

    print(service.get_employee_accumulation(1, 3, 2026))


if __name__ == "__main__":
    main()
