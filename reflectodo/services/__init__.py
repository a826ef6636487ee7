from reflectodo.services import persistence, reflection_flow, task_store, view_builder


__all__ = [
    "persistence",
    "reflection_flow",
    "task_store",
    "view_builder",
]
