from stargazer.main import run

run()
