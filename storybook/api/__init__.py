# Storybook Studio API
