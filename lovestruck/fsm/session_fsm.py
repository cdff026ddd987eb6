import logging
from pathlib import Path

import yaml
from transitions import Machine


class SessionFSM:
    """
    Finite State Machine for one photo booth session.
    Loads its structure from states.yaml for easy modification.
    """

    def __init__(self, config_path=None, callbacks=None, frame_count=None, required_frames=3):
        """
        :param config_path: Optional path to the YAML FSM definition.
        :param callbacks: Optional dict of callbacks for state entry/exit actions.
                          Example: {"on_enter_review": some_function}
        :param frame_count: Callable returning the number of frames captured so far.
        :param required_frames: Frames needed before review can be entered.
        """
        self.log = logging.getLogger("SessionFSM")
        self.config_path = config_path or Path(__file__).parent / "states.yaml"
        self.callbacks = callbacks or {}
        self.frame_count = frame_count or (lambda: 0)
        self.required_frames = required_frames

        with open(self.config_path, "r") as f:
            fsm_config = yaml.safe_load(f)

        states = fsm_config.get("states", [])
        transitions = fsm_config.get("transitions", [])
        initial = fsm_config.get("initial", "idle")

        # Validate callbacks before building the machine
        for name, func in self.callbacks.items():
            if not callable(func):
                raise ValueError(f"Callback '{name}' must be callable, got {type(func)}")
            if not (name.startswith("on_enter_") or name.startswith("on_exit_")):
                raise ValueError(f"Callback name '{name}' should start with 'on_enter_' or 'on_exit_'")
            state_name = name.split("_", 2)[2]
            if state_name not in states:
                raise ValueError(f"Callback '{name}' refers to unknown state '{state_name}'")

        self.machine = Machine(
            model=self,
            states=states,
            transitions=transitions,
            initial=initial,
            auto_transitions=False,
        )

        for name, func in self.callbacks.items():
            _, hook, state_name = name.split("_", 2)
            self.machine.get_state(state_name).add_callback(hook, func)

    # -------------------- Condition Methods --------------------
    # Referenced in states.yaml as conditions for transitions

    def is_session_complete(self):
        """Review is only reachable once every frame of the session exists."""
        complete = self.frame_count() >= self.required_frames
        if not complete:
            self.log.warning(
                f"Session incomplete: {self.frame_count()}/{self.required_frames} frames"
            )
        return complete

