"""Calorie tracker API: meal photo nutrition analysis."""
