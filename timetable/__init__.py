"""
Train timetable board.

This package publishes train-schedule listings and a list of game-server
links. Persistence is either a SQL database (when configured and provisioned)
or a local key-value file, chosen once when a page session or the API process
starts.
"""
