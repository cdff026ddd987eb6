from .session_fsm import SessionFSM

__all__ = ["SessionFSM"]
