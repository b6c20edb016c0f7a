"""Storybook Studio - personalized illustrated storybooks for children."""
