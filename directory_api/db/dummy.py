"""Sample directories for trying the API against an empty database."""

DUMMY_STATEMENTS = (
    """CREATE TABLE authors (
  id SERIAL NOT NULL PRIMARY KEY,
  first_name varchar(50) NOT NULL,
  last_name varchar(50) NOT NULL,
  email varchar(100) NOT NULL UNIQUE
)""",
    """CREATE TABLE jokes (
  id SERIAL NOT NULL PRIMARY KEY,
  setup varchar(255) NOT NULL,
  punchline varchar(500)
)""",
    # ids come from the sequences so later inserts through the API don't collide
    """INSERT INTO authors (first_name, last_name, email) VALUES
('Thomas', 'Tank', 'thomas.the.tank@example.org'),
('Johnny', 'Coalheart', 'JCoal@example.com'),
('Brandy', 'Smokestack', 'smokestack@example.org'),
('Ima', 'Caboose', 'the.boose.is.loose@example.com'),
('Megan', 'Trainer', 'megan@example.com')""",
    """INSERT INTO jokes (setup, punchline) VALUES
('I was gonna tell a joke', 'but I lost my train of thought'),
('How do trains eat?', 'They chew-chew'),
('Why did the crazy guy steal the train?', 'He had locomotives')""",
)
