"""Core building blocks shared by neo-attachments features."""
