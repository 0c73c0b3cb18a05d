"""Feature packages of neo-attachments."""
