# ui_utils.py
import logging
import time

import streamlit as st

from interaction_controller import ActionResult, ActionStatus

logger = logging.getLogger(__name__)


def timed(label="Operation"):
    """
    Decorator to measure execution time of an operator action.
    Example:
        @timed("Route Packet")
        def run_route(): ...
    """
    def decorator(func):
        def wrapper(*args, **kwargs):
            start = time.time()
            result = func(*args, **kwargs)
            elapsed = time.time() - start
            logger.info("%s took %.2f seconds", label, elapsed)
            st.caption(f"⏱️ {label} took {elapsed:.2f} seconds")
            return result
        return wrapper
    return decorator


def show_result(result: ActionResult):
    """
    Surface an ActionResult to the operator.
    Warnings are never silent: duplicates, unknown nodes and not-found links
    all get a visible message.
    """
    if result.status is ActionStatus.APPLIED:
        st.success(result.message)
    elif result.status is ActionStatus.NO_ROUTE:
        st.info(result.message)
    elif result.status in (ActionStatus.WARNING, ActionStatus.INVALID):
        st.warning(result.message)
    else:
        st.error(result.message)
