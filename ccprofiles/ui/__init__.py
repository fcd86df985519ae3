from .selector import ProfileSelector, SelectorState, select_profile

__all__ = ['ProfileSelector', 'SelectorState', 'select_profile']
