from codebase_insight.infrastructure.common.process.process_supervisor import ProcessSupervisor

__all__ = ["ProcessSupervisor"]
