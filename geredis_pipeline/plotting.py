import matplotlib.pyplot as plt
import pandas as pd


def plot_statistics(df: pd.DataFrame) -> None:
    fig, ax = plt.subplots()
    ax.plot(df.start, df.state / 1000, label="Consumption")
    ax.set_xlabel("Time")
    ax.set_ylabel("kWh")
    total_ax = ax.twinx()
    total_ax.plot(df.start, df["sum"] / 1000, color="tab:orange", label="Cumulative")
    total_ax.set_ylabel("Cumulative kWh")
    fig.legend(loc="upper left")
    fig.autofmt_xdate()
    plt.tight_layout()
    plt.show()
