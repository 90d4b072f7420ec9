from stockchart.main import run

run()
