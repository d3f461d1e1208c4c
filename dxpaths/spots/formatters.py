"""Spot formatting for console display."""

from datetime import datetime
from typing import Dict, Optional

from .models import Report, utc_now


class SpotFormatters:
    """Collection of static methods for formatting spot data."""

    @staticmethod
    def format_age(minutes: int) -> str:
        """Format an age in minutes as "now", "5m ago" or "2h ago"."""
        if minutes < 1:
            return "now"
        if minutes < 60:
            return f"{minutes}m ago"
        return f"{minutes // 60}h ago"

    @staticmethod
    def format_time(dt: datetime) -> str:
        """UTC clock time in the usual log notation, e.g. "14:07z"."""
        return dt.strftime("%H:%Mz")

    @staticmethod
    def format_frequency(frequency_hz: Optional[float]) -> str:
        """Frequency in kHz with one decimal, e.g. "14097.0"."""
        if frequency_hz is None:
            return "---"
        return f"{frequency_hz / 1000:.1f}"

    @staticmethod
    def format_snr(snr: Optional[float]) -> str:
        if snr is None:
            return "N/A"
        return f"{round(snr)} dB"

    @staticmethod
    def format_distance(km: Optional[float]) -> str:
        if km is None:
            return "---"
        return f"{km:,.0f} km"

    @staticmethod
    def format_report(report: Report, now: Optional[datetime] = None) -> Dict[str, str]:
        """Format a report as display columns.

        Args:
            report: Report to format
            now: Reference time for the age column

        Returns:
            Dictionary of formatted fields
        """
        now = now or utc_now()
        return {
            "time": SpotFormatters.format_time(report.observed_at),
            "age": SpotFormatters.format_age(report.age_minutes(now)),
            "origin": report.origin_call,
            "destination": report.destination_call,
            "frequency": SpotFormatters.format_frequency(report.frequency_hz),
            "band": report.band,
            "mode": report.mode or "---",
            "snr": SpotFormatters.format_snr(report.snr),
            "signal": report.signal.label,
            "distance": SpotFormatters.format_distance(report.distance_km),
        }
