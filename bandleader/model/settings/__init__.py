from .wrapper_settings import WrapperSettings, DEFAULT_THEME_COLOR

__all__ = ['WrapperSettings', 'DEFAULT_THEME_COLOR']
