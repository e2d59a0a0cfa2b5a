"""Clinic scheduling API: patients, doctors and appointments."""
