"""Page objects for the MyFit Flutter Web app."""

from src.drivers.web.pages.dashboard import DashboardPage
from src.drivers.web.pages.login import LoginPage
from src.drivers.web.pages.onboarding import OnboardingPage
from src.drivers.web.pages.register import RegisterPage
from src.drivers.web.pages.workout_session import WorkoutSessionPage

__all__ = [
    "DashboardPage",
    "LoginPage",
    "OnboardingPage",
    "RegisterPage",
    "WorkoutSessionPage",
]
