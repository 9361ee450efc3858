"""Core utilities shared by the diary, trends and CLI layers."""
